"""
Graphics backend selection
"""

from enum import Enum
from typing import Union

from .platform import PlatformClassification
from .sokol_types.exceptions import ConfigurationError


class Backend(Enum):
    """A concrete graphics backend the library is compiled against"""
    D3D11 = "d3d11"
    METAL = "metal"
    GL = "gl"
    GLES3 = "gles3"
    WGPU = "wgpu"

    @property
    def define(self) -> str:
        """Preprocessor flag selecting this backend"""
        return BACKEND_DEFINES[self]


BACKEND_DEFINES = {
    Backend.D3D11: "-DSOKOL_D3D11",
    Backend.METAL: "-DSOKOL_METAL",
    Backend.GL: "-DSOKOL_GLCORE33",
    Backend.GLES3: "-DSOKOL_GLES3",
    Backend.WGPU: "-DSOKOL_WGPU",
}


class BackendRequest(Enum):
    """A backend as requested by the user; AUTO still has to be resolved"""
    AUTO = "auto"
    D3D11 = "d3d11"
    METAL = "metal"
    GL = "gl"
    GLES3 = "gles3"
    WGPU = "wgpu"

    @classmethod
    def parse(cls, value: Union[str, "BackendRequest", Backend]) -> "BackendRequest":
        """Accepts a request, a concrete backend, or its lowercase name"""
        if isinstance(value, BackendRequest):
            return value
        if isinstance(value, Backend):
            return cls(value.value)
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            raise ConfigurationError(f"Unknown backend '{value}' (valid: {valid})") from None


DEFAULT_BACKENDS = {
    PlatformClassification.APPLE_DESKTOP: Backend.METAL,
    PlatformClassification.APPLE_MOBILE: Backend.METAL,
    PlatformClassification.WINDOWS: Backend.D3D11,
    PlatformClassification.WEB: Backend.GLES3,
    PlatformClassification.ANDROID: Backend.GLES3,
}


def select_backend(classification: PlatformClassification,
                   request: BackendRequest = BackendRequest.AUTO) -> Backend:
    """
    Resolve a backend request for a platform

    AUTO picks the platform default; any other request is returned as-is,
    except that Android only supports GLES3.

    Args:
        classification: Target platform classification
        request: Requested backend

    Returns:
        The concrete Backend

    Raises:
        ConfigurationError: A non-GLES3 backend was requested for Android
    """
    if request is BackendRequest.AUTO:
        backend = DEFAULT_BACKENDS.get(classification, Backend.GL)
    else:
        backend = Backend(request.value)

    if classification is PlatformClassification.ANDROID and backend is not Backend.GLES3:
        raise ConfigurationError(
            f"For android targets, the backend must be GLES3 (requested: {backend.value})"
        )
    return backend


__all__ = ["Backend", "BackendRequest", "select_backend", "DEFAULT_BACKENDS"]
