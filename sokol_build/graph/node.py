"""
Build nodes, named steps and the graph that holds them
"""

from collections import deque
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..sokol_types.exceptions import GraphError
from .actions import Action


class NodeKind(Enum):
    """What a build node does"""
    COMPILE = "compile"
    ARCHIVE = "archive"
    LINK = "link"
    RUN = "run"
    SDK_INSTALL = "sdk-install"
    SDK_ACTIVATE = "sdk-activate"
    EMCC_LINK = "emcc-link"
    EMRUN = "emrun"
    SHADER = "shader"


class BuildNode:
    """One schedulable unit of work"""

    def __init__(self,
                 name: str,
                 kind: NodeKind,
                 action: Action,
                 outputs: Optional[Iterable[Path]] = None,
                 description: Optional[str] = None):
        self.name = name
        self.kind = kind
        self.action = action
        self.outputs: List[Path] = [Path(o) for o in (outputs or [])]
        self.description = description or name
        self.dependencies: List["BuildNode"] = []

    @property
    def output(self) -> Optional[Path]:
        """The first declared output, if any"""
        return self.outputs[0] if self.outputs else None

    def depend_on(self, *nodes: Optional["BuildNode"]) -> "BuildNode":
        """Add predecessors; None entries are ignored"""
        for node in nodes:
            if node is not None and node not in self.dependencies:
                self.dependencies.append(node)
        return self

    def __repr__(self) -> str:
        return f"BuildNode({self.name!r}, {self.kind.value})"


class Step:
    """A named, externally invokable entry point into the graph"""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self.dependencies: List[BuildNode] = []

    def depend_on(self, *nodes: Optional[BuildNode]) -> "Step":
        for node in nodes:
            if node is not None and node not in self.dependencies:
                self.dependencies.append(node)
        return self


class BuildGraph:
    """A directed acyclic graph of build nodes plus the named steps"""

    def __init__(self):
        self.nodes: Dict[str, BuildNode] = {}
        self.steps: Dict[str, Step] = {}
        self._outputs: Dict[Path, str] = {}

    def add(self, node: BuildNode) -> BuildNode:
        """
        Register a node

        Raises:
            GraphError: The name is taken or an output is already produced elsewhere
        """
        if node.name in self.nodes:
            raise GraphError(f"Duplicate build node: {node.name}")
        for output in node.outputs:
            key = output.resolve()
            if key in self._outputs:
                raise GraphError(
                    f"Output {output} of {node.name} is already produced by {self._outputs[key]}"
                )
        for output in node.outputs:
            self._outputs[output.resolve()] = node.name
        self.nodes[node.name] = node
        return node

    def get(self, name: str) -> BuildNode:
        if name not in self.nodes:
            raise GraphError(f"Unknown build node: {name}")
        return self.nodes[name]

    def step(self, name: str, description: str) -> Step:
        """Create (or return) a named step"""
        if name not in self.steps:
            self.steps[name] = Step(name, description)
        return self.steps[name]

    def get_step(self, name: str) -> Step:
        if name not in self.steps:
            available = ", ".join(sorted(self.steps))
            raise GraphError(f"Unknown step: {name} (available: {available})")
        return self.steps[name]

    def closure(self, roots: Iterable[BuildNode]) -> List[BuildNode]:
        """All nodes reachable from roots through their dependencies"""
        seen: Dict[str, BuildNode] = {}
        stack = list(roots)
        while stack:
            node = stack.pop()
            if node.name in seen:
                continue
            if self.nodes.get(node.name) is not node:
                raise GraphError(f"Node {node.name} is not registered in the graph")
            seen[node.name] = node
            stack.extend(node.dependencies)
        return list(seen.values())

    def topological_order(self, nodes: Optional[Iterable[BuildNode]] = None) -> List[BuildNode]:
        """
        Order nodes so that every node comes after its dependencies

        Ties keep registration order so the result is deterministic.

        Raises:
            GraphError: The nodes contain a cycle
        """
        if nodes is None:
            selected = list(self.nodes.values())
        else:
            selected = list(nodes)
        position = {name: index for index, name in enumerate(self.nodes)}
        selected.sort(key=lambda n: position.get(n.name, len(position)))
        names = {n.name for n in selected}

        remaining = {n.name: sum(1 for d in n.dependencies if d.name in names) for n in selected}
        dependents: Dict[str, List[BuildNode]] = {n.name: [] for n in selected}
        for node in selected:
            for dep in node.dependencies:
                if dep.name in names:
                    dependents[dep.name].append(node)

        queue = deque(n for n in selected if remaining[n.name] == 0)
        order: List[BuildNode] = []
        while queue:
            node = queue.popleft()
            order.append(node)
            for dependent in dependents[node.name]:
                remaining[dependent.name] -= 1
                if remaining[dependent.name] == 0:
                    queue.append(dependent)

        if len(order) != len(selected):
            stuck = sorted(name for name, count in remaining.items() if count > 0)
            raise GraphError(f"Dependency cycle between: {', '.join(stuck)}")
        return order

    def plan(self, step_names: Iterable[str]) -> List[BuildNode]:
        """Nodes needed by the given steps, in dependency order"""
        roots: List[BuildNode] = []
        for name in step_names:
            roots.extend(self.get_step(name).dependencies)
        return self.topological_order(self.closure(roots))


__all__ = ["NodeKind", "BuildNode", "Step", "BuildGraph"]
