"""
Sokol Build System
Builds the sokol C library, its samples and shaders for desktop, mobile and web targets
"""

__version__ = "1.0.0"

from .main import BuildSystem

__all__ = ["BuildSystem", "__version__"]
