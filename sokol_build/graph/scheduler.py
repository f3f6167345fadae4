"""
Parallel execution of a build graph
"""

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from .actions import CommandRunner
from .node import BuildNode


class NodeState(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ExecutionReport:
    """Outcome of one scheduler run"""
    states: Dict[str, NodeState] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)
    returncodes: Dict[str, Optional[int]] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return all(state is NodeState.SUCCEEDED for state in self.states.values())

    def nodes_in(self, state: NodeState) -> List[str]:
        return [name for name, s in self.states.items() if s is state]

    @property
    def failed(self) -> List[str]:
        return self.nodes_in(NodeState.FAILED)

    @property
    def skipped(self) -> List[str]:
        return self.nodes_in(NodeState.SKIPPED)

    def exit_code(self, name: str) -> int:
        """
        Process-style exit code for a node

        0 when it succeeded, the external program's code when it failed with
        one, and 1 for anything else.
        """
        state = self.states.get(name)
        if state is NodeState.SUCCEEDED:
            return 0
        code = self.returncodes.get(name)
        if state is NodeState.FAILED and code:
            return code
        return 1


class GraphScheduler:
    """
    Runs build nodes once all their predecessors have succeeded.

    Independent nodes run concurrently on a thread pool. A failed node marks
    every transitive dependent as skipped; nothing is retried.
    """

    def __init__(self, runner: CommandRunner, logger: Any, jobs: int = 1, keep_going: bool = True):
        """
        Initialize the scheduler

        Args:
            runner: Command runner handed to every action
            logger: Logger instance
            jobs: Maximum number of nodes running at once
            keep_going: Keep running independent nodes after a failure
        """
        self.runner = runner
        self.logger = logger
        self.jobs = max(1, jobs)
        self.keep_going = keep_going

    def _run_node(self, node: BuildNode) -> None:
        self.logger.info(f"{node.kind.value}: {node.description}")
        node.action.execute(self.runner)

    def execute(self, nodes: List[BuildNode]) -> ExecutionReport:
        """
        Execute nodes (which must be closed under dependencies)

        Args:
            nodes: Nodes in dependency order

        Returns:
            ExecutionReport with the state of every node
        """
        report = ExecutionReport()
        names = {n.name for n in nodes}
        remaining: Dict[str, int] = {}
        dependents: Dict[str, List[BuildNode]] = {n.name: [] for n in nodes}
        for node in nodes:
            report.states[node.name] = NodeState.PENDING
            remaining[node.name] = sum(1 for d in node.dependencies if d.name in names)
            for dep in node.dependencies:
                if dep.name in names:
                    dependents[dep.name].append(node)

        ready: List[BuildNode] = [n for n in nodes if remaining[n.name] == 0]
        running: Dict[Future, BuildNode] = {}
        stop = False

        def skip_dependents(failed: BuildNode) -> None:
            stack = list(dependents[failed.name])
            seen: Set[str] = set()
            while stack:
                node = stack.pop()
                if node.name in seen:
                    continue
                seen.add(node.name)
                if report.states[node.name] is NodeState.PENDING:
                    report.states[node.name] = NodeState.SKIPPED
                    self.logger.warning(f"Skipping {node.name}: {failed.name} failed")
                stack.extend(dependents[node.name])

        with ThreadPoolExecutor(max_workers=self.jobs) as executor:
            while ready or running:
                while ready and not stop:
                    node = ready.pop(0)
                    running[executor.submit(self._run_node, node)] = node
                if not running:
                    break

                done, _ = wait(list(running), return_when=FIRST_COMPLETED)
                for future in done:
                    node = running.pop(future)
                    report.returncodes[node.name] = node.action.returncode
                    try:
                        future.result()
                    except Exception as e:
                        report.states[node.name] = NodeState.FAILED
                        report.errors[node.name] = e
                        self.logger.error(f"{node.name} failed: {e}")
                        skip_dependents(node)
                        if not self.keep_going:
                            stop = True
                        continue

                    report.states[node.name] = NodeState.SUCCEEDED
                    for dependent in dependents[node.name]:
                        remaining[dependent.name] -= 1
                        if (remaining[dependent.name] == 0
                                and report.states[dependent.name] is NodeState.PENDING):
                            ready.append(dependent)

        for name, state in report.states.items():
            if state is NodeState.PENDING:
                report.states[name] = NodeState.SKIPPED

        return report


__all__ = ["NodeState", "ExecutionReport", "GraphScheduler"]
