"""
Target detection and classification
"""

import os
import platform
import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class PlatformClassification(Enum):
    """Bucket a target triple is sorted into for flag and link-set selection"""
    APPLE_DESKTOP = "apple-desktop"
    APPLE_MOBILE = "apple-mobile"
    WINDOWS = "windows"
    LINUX = "linux"
    ANDROID = "android"
    WEB = "web"
    OTHER = "other"


APPLE_DESKTOP_OS = {"macos", "macosx", "darwin"}
APPLE_MOBILE_OS = {"ios", "tvos", "watchos", "visionos"}
WASM_ARCHS = {"wasm32", "wasm64"}

# Vendor fields that may sit between arch and os in GNU-style triples
VENDORS = {"pc", "unknown", "apple", "w64", "none"}

ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "x86",
    "i686": "x86",
}

OS_ALIASES = {
    "darwin": "macos",
    "macosx": "macos",
    "mingw32": "windows",
    "win32": "windows",
}


@dataclass(frozen=True)
class TargetTriple:
    """An ``arch-os[-abi]`` target description"""
    arch: str
    os: str
    abi: str = ""

    def __str__(self) -> str:
        if self.abi:
            return f"{self.arch}-{self.os}-{self.abi}"
        return f"{self.arch}-{self.os}"


def parse_target(text: str) -> TargetTriple:
    """
    Parse a target triple string

    Accepts both the short ``arch-os-abi`` form (``x86_64-linux-gnu``,
    ``wasm32-emscripten``) and GNU-style quads with a vendor field
    (``x86_64-pc-windows-msvc``, ``aarch64-unknown-linux-android``).

    Args:
        text: Target triple

    Returns:
        Parsed TargetTriple
    """
    parts = [p for p in text.strip().lower().split("-") if p]
    if not parts:
        return TargetTriple(arch="unknown", os="unknown")

    arch = ARCH_ALIASES.get(parts[0], parts[0])
    rest = parts[1:]
    while len(rest) > 1 and rest[0] in VENDORS:
        rest = rest[1:]

    os_name = rest[0] if rest else "unknown"
    # Versioned Apple OS names such as darwin23.1.0, macosx14.0 or ios17
    match = re.match(r"^(darwin|macosx|macos|ios|tvos|watchos|visionos)[0-9.]*$", os_name)
    if match:
        os_name = match.group(1)
    os_name = OS_ALIASES.get(os_name, os_name)
    abi = "-".join(rest[1:]) if len(rest) > 1 else ""
    return TargetTriple(arch=arch, os=os_name, abi=abi)


def classify(triple: TargetTriple) -> PlatformClassification:
    """Sort a target triple into its PlatformClassification (total, never raises)"""
    if triple.os in APPLE_DESKTOP_OS:
        return PlatformClassification.APPLE_DESKTOP
    if triple.os in APPLE_MOBILE_OS:
        return PlatformClassification.APPLE_MOBILE
    if triple.os == "windows":
        return PlatformClassification.WINDOWS
    if triple.os == "android" or triple.abi.startswith("android"):
        return PlatformClassification.ANDROID
    if triple.os == "linux":
        return PlatformClassification.LINUX
    if triple.arch in WASM_ARCHS:
        return PlatformClassification.WEB
    return PlatformClassification.OTHER


@dataclass(frozen=True)
class TargetDescriptor:
    """A resolved build target: the raw triple plus its classification"""
    triple: TargetTriple
    classification: PlatformClassification
    native: bool = False

    @property
    def is_darwin(self) -> bool:
        return self.classification in (PlatformClassification.APPLE_DESKTOP,
                                       PlatformClassification.APPLE_MOBILE)

    @property
    def is_apple_mobile(self) -> bool:
        return self.classification is PlatformClassification.APPLE_MOBILE

    @property
    def is_windows(self) -> bool:
        return self.classification is PlatformClassification.WINDOWS

    @property
    def is_linux(self) -> bool:
        return self.classification is PlatformClassification.LINUX

    @property
    def is_android(self) -> bool:
        return self.classification is PlatformClassification.ANDROID

    @property
    def is_wasm(self) -> bool:
        return self.triple.arch in WASM_ARCHS

    @property
    def is_emscripten(self) -> bool:
        return self.is_wasm and self.triple.os == "emscripten"

    @property
    def is_native(self) -> bool:
        return self.native

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.is_windows else ""

    def static_library_name(self, name: str) -> str:
        """File name of a static library for this target"""
        if self.is_windows and self.triple.abi.startswith("msvc"):
            return f"{name}.lib"
        return f"lib{name}.a"

    def __str__(self) -> str:
        return f"{self.triple} ({self.classification.value})"


def resolve_target(target: Union[TargetTriple, str], native: bool = False) -> TargetDescriptor:
    """
    Resolve a target triple into a TargetDescriptor

    Args:
        target: TargetTriple or triple text
        native: True when the target is the host itself

    Returns:
        TargetDescriptor with its classification
    """
    triple = parse_target(target) if isinstance(target, str) else target
    return TargetDescriptor(triple=triple, classification=classify(triple), native=native)


def detect_cross_target() -> Optional[str]:
    """
    Detect a cross-compilation target from the environment.

    Checks the CC compiler prefix (``aarch64-linux-gnu-gcc``) and then
    CROSS_COMPILE. Returns the triple text or None for native builds.
    """
    cc = os.environ.get("CC", "")
    if cc:
        cc_base = cc.split()[-1]  # Handle 'ccache aarch64-...-gcc'
        patterns = [
            r"([a-z0-9_]+-[a-z0-9_]+-[a-z0-9_]+-[a-z0-9_]+)-(?:gcc|g\+\+|clang)",
            r"([a-z0-9_]+-[a-z0-9_]+-[a-z0-9_]+)-(?:gcc|g\+\+|clang)",
            r"([a-z0-9_]+-[a-z0-9_]+)-(?:gcc|g\+\+|clang)",
        ]
        for pattern in patterns:
            match = re.match(pattern, cc_base, re.IGNORECASE)
            if match:
                return match.group(1)

    cross_compile = os.environ.get("CROSS_COMPILE", "")
    if cross_compile:
        return cross_compile.rstrip("-")

    return None


class PlatformDetector:
    """Detects and provides information about the host platform"""

    def detect(self) -> Dict[str, Any]:
        """
        Detect the host platform and architecture

        Returns:
            Dictionary with platform information
        """
        return {
            "os": platform.system(),
            "platform": self._get_platform_name(),
            "arch": self._get_architecture(),
            "machine": platform.machine(),
            "python_version": sys.version,
        }

    def host_triple(self) -> TargetTriple:
        """Returns the triple describing the host"""
        os_name = self._get_platform_name()
        abi = ""
        if os_name == "linux":
            abi = "gnu"
        elif os_name == "windows":
            abi = "msvc"
        return TargetTriple(arch=self._get_architecture(), os=os_name, abi=abi)

    def host_key(self) -> str:
        """Key used to pick host-specific tool binaries (e.g. ``macos-aarch64``)"""
        os_name = self._get_platform_name()
        if os_name == "macos":
            return f"macos-{self._get_architecture()}"
        return os_name

    def _get_platform_name(self) -> str:
        """Get normalized platform name"""
        system = platform.system().lower()

        if system == "linux":
            return "linux"
        elif system == "windows":
            return "windows"
        elif system == "darwin":
            return "macos"
        else:
            return system

    def _get_architecture(self) -> str:
        """Get normalized machine architecture"""
        machine = platform.machine().lower()
        if machine in ["aarch64", "arm64"]:
            return "aarch64"
        elif machine in ["i386", "i686", "x86"]:
            return "x86"
        elif machine in ["x86_64", "amd64"]:
            return "x86_64"
        return machine or "unknown"


def resolve_build_target(target: Optional[str] = None,
                         detector: Optional[PlatformDetector] = None) -> TargetDescriptor:
    """
    Resolve the target for a build invocation

    An explicit target wins; ``native`` or no target at all falls back to a
    cross target found in the environment, then to the host.
    """
    detector = detector or PlatformDetector()
    host = detector.host_triple()
    if target and target != "native":
        triple = parse_target(target)
        return resolve_target(triple, native=(triple == host))

    if target != "native":
        cross = detect_cross_target()
        if cross:
            return resolve_target(cross, native=False)
    return resolve_target(host, native=True)


__all__ = [
    "PlatformClassification",
    "TargetTriple",
    "TargetDescriptor",
    "PlatformDetector",
    "parse_target",
    "classify",
    "resolve_target",
    "resolve_build_target",
    "detect_cross_target",
]
