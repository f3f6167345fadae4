"""
Compile flag and link set assembly

Every platform classification owns a small class holding its own flag and
link tables. ``assemble_flags`` dispatches on the classification.
"""

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..backend import Backend
from ..platform import PlatformClassification
from ..sokol_types.configuration import FeatureToggles
from ..sokol_types.exceptions import ConfigurationError


@dataclass(frozen=True)
class FlagSet:
    """Ordered preprocessor flags and link targets for one build"""
    cflags: Tuple[str, ...] = ()
    frameworks: Tuple[str, ...] = ()
    libraries: Tuple[str, ...] = ()

    @property
    def link_set(self) -> List[str]:
        """Frameworks followed by system libraries"""
        return list(self.frameworks) + list(self.libraries)

    def compiler_args(self) -> List[str]:
        """
        Flags as they go onto a compiler command line.

        Empty slots are dropped and slots holding several flags are split.
        """
        args: List[str] = []
        for slot in self.cflags:
            args.extend(shlex.split(slot))
        return args

    def linker_args(self) -> List[str]:
        """Link set as linker arguments"""
        args: List[str] = []
        for framework in self.frameworks:
            args.extend(["-framework", framework])
        args.extend(f"-l{lib}" for lib in self.libraries)
        return args


@dataclass
class _FlagBuilder:
    cflags: List[str] = field(default_factory=list)
    frameworks: List[str] = field(default_factory=list)
    libraries: List[str] = field(default_factory=list)

    def freeze(self) -> FlagSet:
        return FlagSet(tuple(self.cflags), tuple(self.frameworks), tuple(self.libraries))


class PlatformFlags(ABC):
    """Flag and link tables for one platform classification"""

    classification: PlatformClassification

    @abstractmethod
    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        """Build the FlagSet for a resolved backend"""


class AppleFlags(PlatformFlags):
    """macOS and iOS"""

    CORE_FRAMEWORKS = ("Foundation", "AudioToolbox")
    METAL_FRAMEWORKS = ("MetalKit", "Metal")

    def __init__(self, mobile: bool):
        self.mobile = mobile
        self.classification = (PlatformClassification.APPLE_MOBILE if mobile
                               else PlatformClassification.APPLE_DESKTOP)

    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        out = _FlagBuilder(cflags=["-ObjC", backend.define])
        out.frameworks.extend(self.CORE_FRAMEWORKS)
        if backend is Backend.METAL:
            out.frameworks.extend(self.METAL_FRAMEWORKS)
        if self.mobile:
            out.frameworks.extend(["UIKit", "AVFoundation"])
            if backend is Backend.GL:
                out.frameworks.extend(["OpenGLES", "GLKit"])
        else:
            out.frameworks.extend(["Cocoa", "QuartzCore"])
            if backend is Backend.GL:
                out.frameworks.append("OpenGL")
        return out.freeze()


class AndroidFlags(PlatformFlags):
    classification = PlatformClassification.ANDROID

    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        if backend is not Backend.GLES3:
            raise ConfigurationError("For android targets, you must have backend set to GLES3")
        return FlagSet(
            cflags=(backend.define,),
            libraries=("GLESv3", "EGL", "android", "log"),
        )


class LinuxFlags(PlatformFlags):
    """
    Linux desktop

    The cflags hold three slots: backend, window system and Wayland. The
    window system slot concatenates the EGL and X11 switches and is empty when
    neither applies.
    """
    classification = PlatformClassification.LINUX

    X11_LIBRARIES = ("X11", "Xi", "Xcursor")
    WAYLAND_LIBRARIES = ("wayland-client", "wayland-cursor", "wayland-egl", "xkbcommon")

    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        if not toggles.enable_x11 and not toggles.enable_wayland:
            raise ConfigurationError(
                "Linux builds need at least one window system: enable X11 or Wayland"
            )

        egl_cflags = "-DSOKOL_FORCE_EGL " if toggles.force_egl else ""
        x11_cflags = "-DSOKOL_DISABLE_X11 " if not toggles.enable_x11 else ""
        wayland_cflags = "-DSOKOL_DISABLE_WAYLAND" if not toggles.enable_wayland else ""
        link_egl = toggles.force_egl or toggles.enable_wayland

        out = _FlagBuilder(cflags=[backend.define, egl_cflags + x11_cflags, wayland_cflags])
        out.libraries.extend(["asound", "GL"])
        if toggles.enable_x11:
            out.libraries.extend(self.X11_LIBRARIES)
        if toggles.enable_wayland:
            out.libraries.extend(self.WAYLAND_LIBRARIES)
        if link_egl:
            out.libraries.append("EGL")
        return out.freeze()


class WindowsFlags(PlatformFlags):
    classification = PlatformClassification.WINDOWS

    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        out = _FlagBuilder(cflags=[backend.define])
        out.libraries.extend(["kernel32", "user32", "gdi32", "ole32"])
        if backend is Backend.D3D11:
            out.libraries.extend(["d3d11", "dxgi"])
        return out.freeze()


class WebFlags(PlatformFlags):
    """Web: linking happens in emcc, so there is no native link set"""
    classification = PlatformClassification.WEB

    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        return FlagSet(cflags=(backend.define,))


class GenericFlags(PlatformFlags):
    classification = PlatformClassification.OTHER

    def assemble(self, backend: Backend, toggles: FeatureToggles) -> FlagSet:
        return FlagSet(cflags=(backend.define,))


PLATFORM_FLAGS: Dict[PlatformClassification, PlatformFlags] = {
    PlatformClassification.APPLE_DESKTOP: AppleFlags(mobile=False),
    PlatformClassification.APPLE_MOBILE: AppleFlags(mobile=True),
    PlatformClassification.ANDROID: AndroidFlags(),
    PlatformClassification.LINUX: LinuxFlags(),
    PlatformClassification.WINDOWS: WindowsFlags(),
    PlatformClassification.WEB: WebFlags(),
    PlatformClassification.OTHER: GenericFlags(),
}


def assemble_flags(classification: PlatformClassification,
                   backend: Backend,
                   toggles: FeatureToggles) -> FlagSet:
    """
    Assemble preprocessor flags and link set for a platform

    Args:
        classification: Target platform classification
        backend: Resolved backend
        toggles: Feature toggles

    Returns:
        FlagSet for the platform
    """
    return PLATFORM_FLAGS[classification].assemble(backend, toggles)


__all__ = [
    "FlagSet",
    "PlatformFlags",
    "AppleFlags",
    "AndroidFlags",
    "LinuxFlags",
    "WindowsFlags",
    "WebFlags",
    "GenericFlags",
    "PLATFORM_FLAGS",
    "assemble_flags",
]
