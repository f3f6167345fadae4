"""
Static library builder for the sokol C sources
"""

from typing import Optional

from ..graph import BuildGraph, BuildNode
from .base_builder import BaseBuilder

IMPL_DEFINE = "-DIMPL"


class LibraryBuilder(BaseBuilder):
    """Compiles the library's translation units into one static library"""

    @property
    def library_path(self):
        name = self.config.catalog.library.name
        return self.out_dir / "lib" / self.plan.target.static_library_name(name)

    def build(self, graph: BuildGraph, sdk_setup: Optional[BuildNode] = None) -> BuildNode:
        """
        Add the library node to the graph

        Args:
            graph: Graph to add to
            sdk_setup: Emscripten SDK bootstrap node the compile has to wait for

        Returns:
            The library node
        """
        sources = [self.source_path(src) for src in self.config.get_library_sources()]
        node = self.static_library_node(
            graph,
            name=self.config.catalog.library.name,
            sources=sources,
            archive=self.library_path,
            defines=[IMPL_DEFINE],
            description=f"{self.library_path.name} ({self.plan.backend.value}, {self.plan.target.triple})",
        )
        node.depend_on(sdk_setup)
        self.logger.debug(f"Library node {node.name}: {len(sources)} sources -> {self.library_path}")
        return node
