"""
Shared types for the sokol build system
"""

from .configuration import (
    BuildCatalog,
    BuildOptions,
    FeatureToggles,
    OptimizeMode,
    PlatformTable,
)
from .exceptions import (
    ConfigurationError,
    ExternalProcessError,
    GraphError,
    SokolBuildError,
    ToolchainEnvironmentError,
)

__all__ = [
    "BuildCatalog",
    "BuildOptions",
    "FeatureToggles",
    "OptimizeMode",
    "PlatformTable",
    "ConfigurationError",
    "ExternalProcessError",
    "GraphError",
    "SokolBuildError",
    "ToolchainEnvironmentError",
]
