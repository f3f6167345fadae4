"""
The resolved, immutable decisions for one build invocation
"""

from dataclasses import dataclass
from typing import Any, Dict

from .backend import Backend, BackendRequest, select_backend
from .flags import FlagSet, assemble_flags
from .platform import TargetDescriptor
from .sokol_types.configuration import FeatureToggles, OptimizeMode
from .sokol_types.exceptions import ConfigurationError


@dataclass(frozen=True)
class BuildPlan:
    """Target, backend and flags shared by every builder of one build"""
    target: TargetDescriptor
    backend: Backend
    toggles: FeatureToggles
    flags: FlagSet
    optimize: OptimizeMode = OptimizeMode.DEBUG

    def describe(self) -> Dict[str, Any]:
        return {
            "target": str(self.target.triple),
            "classification": self.target.classification.value,
            "backend": self.backend.value,
            "optimize": self.optimize.value,
            "cflags": list(self.flags.cflags),
            "link_set": self.flags.link_set,
            "toggles": self.toggles.model_dump(),
        }


def make_plan(target: TargetDescriptor,
              toggles: FeatureToggles,
              request: BackendRequest = BackendRequest.AUTO,
              optimize: OptimizeMode = OptimizeMode.DEBUG) -> BuildPlan:
    """
    Resolve everything that has to be decided before any node is built

    Args:
        target: Resolved target
        toggles: Feature toggles
        request: Explicit backend request
        optimize: Optimization mode

    Returns:
        BuildPlan

    Raises:
        ConfigurationError: The combination can never build
    """
    if target.is_wasm and not target.is_emscripten:
        raise ConfigurationError(
            f"Web builds need the emscripten target environment; "
            f"please build with --target={target.triple.arch}-emscripten "
            f"(got {target.triple})"
        )

    if toggles.force_gl:
        if request not in (BackendRequest.AUTO, BackendRequest.GL):
            raise ConfigurationError(
                f"--gl conflicts with the explicitly requested backend '{request.value}'"
            )
        request = BackendRequest.GL

    backend = select_backend(target.classification, request)
    flags = assemble_flags(target.classification, backend, toggles)
    return BuildPlan(target=target, backend=backend, toggles=toggles, flags=flags, optimize=optimize)


__all__ = ["BuildPlan", "make_plan"]
