"""Holds exceptions used by the sokol build system"""

from typing import List, Optional


class SokolBuildError(Exception):
    """Base class for every error raised by the build system"""


class ConfigurationError(SokolBuildError):
    """Raised when the requested build configuration can never be valid.

    Raised while the build plan is assembled, before any node exists.
    """


class ToolchainEnvironmentError(SokolBuildError):
    """Raised when a required external toolchain cannot be located"""


class ExternalProcessError(SokolBuildError):
    """Raised when an external program exits non-zero or cannot be started"""

    def __init__(self, cmd: List[str], returncode: int, message: Optional[str] = None):
        self.cmd = [str(c) for c in cmd]
        self.returncode = returncode
        if message is None:
            message = f"Command exited with code {returncode}: {' '.join(self.cmd)}"
        super().__init__(message)


class GraphError(SokolBuildError):
    """Raised when the build graph is malformed or an unknown step is requested"""
