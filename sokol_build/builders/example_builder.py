"""
Sample program builder
"""

from pathlib import Path
from typing import List, Optional

from ..graph import BuildGraph, BuildNode, CommandAction, NodeKind
from .base_builder import BaseBuilder, BuildContext, Toolchain
from .emscripten_builder import EmscriptenBuilder


def run_step_name(name: str) -> str:
    return f"run-{name}"


class ExampleBuilder(BaseBuilder):
    """Builds every sample and registers a ``run-<name>`` step for each"""

    def __init__(self,
                 context: BuildContext,
                 toolchain: Toolchain,
                 bridge: Optional[EmscriptenBuilder] = None):
        super().__init__(context, toolchain)
        self.bridge = bridge

    def source_for(self, name: str) -> Path:
        examples = self.config.catalog.examples
        return self.source_path(f"{examples.source_root}/{name}{examples.source_suffix}")

    def executable_path(self, name: str) -> Path:
        return self.out_dir / "bin" / f"{name}{self.plan.target.executable_suffix}"

    def build(self, graph: BuildGraph, library: BuildNode) -> List[BuildNode]:
        """
        Add nodes for all samples

        Args:
            graph: Graph to add to
            library: The static library node

        Returns:
            The nodes producing installable artifacts
        """
        artifacts = []
        for name in self.config.get_examples():
            if self.plan.target.is_wasm:
                artifacts.append(self._build_web(graph, name, library))
            else:
                artifacts.append(self._build_native(graph, name, library))
        return artifacts

    def _build_native(self, graph: BuildGraph, name: str, library: BuildNode) -> BuildNode:
        source = self.source_for(name)
        obj = self.object_path(name, source)
        compile_node = graph.add(BuildNode(
            name=f"compile-{name}",
            kind=NodeKind.COMPILE,
            action=self.compile_action(source, obj),
            outputs=[obj],
            description=f"compile {source.name}",
        ))

        exe = self.executable_path(name)
        cmd = list(self.toolchain.cc)
        cmd.extend([str(obj), str(library.output), "-o", str(exe)])
        cmd.extend(self.plan.flags.linker_args())
        link_node = graph.add(BuildNode(
            name=f"link-{name}",
            kind=NodeKind.LINK,
            action=CommandAction(cmd, cwd=self.root_dir, make_dirs=[exe.parent]),
            outputs=[exe],
            description=f"link {exe.name}",
        ))
        link_node.depend_on(library, compile_node)

        run_node = graph.add(BuildNode(
            name=f"exec-{name}",
            kind=NodeKind.RUN,
            action=CommandAction([str(exe)], cwd=self.root_dir),
            description=f"run {exe.name}",
        ))
        run_node.depend_on(link_node)
        graph.step(run_step_name(name), f"Run {name}").depend_on(run_node)
        return link_node

    def _build_web(self, graph: BuildGraph, name: str, library: BuildNode) -> BuildNode:
        # Linking happens in emcc, so the sample is compiled into its own archive
        archive = self.cache_dir / "lib" / self.plan.target.static_library_name(name)
        main = self.static_library_node(
            graph,
            name=name,
            sources=[self.source_for(name)],
            archive=archive,
            description=f"sample archive {archive.name}",
        )
        main.depend_on(self.bridge.setup_node(graph))

        link = self.bridge.link_node(graph, name, library, main)
        run = self.bridge.run_node(graph, name, link)
        graph.step(run_step_name(name), f"Run {name}").depend_on(run)
        return link
