"""
Builders that turn a build plan into graph nodes
"""

from .base_builder import BaseBuilder, BuildContext, Toolchain
from .library_builder import LibraryBuilder
from .emscripten_builder import EmscriptenBuilder
from .example_builder import ExampleBuilder
from .shader_builder import ShaderBuilder
from .orchestrator import BuildOrchestrator, INSTALL_STEP

__all__ = [
    "BaseBuilder",
    "BuildContext",
    "Toolchain",
    "LibraryBuilder",
    "EmscriptenBuilder",
    "ExampleBuilder",
    "ShaderBuilder",
    "BuildOrchestrator",
    "INSTALL_STEP",
]
