"""Contains models used by the configuration loader and the build plan"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OptimizeMode(str, Enum):
    """Optimization level requested for a build"""
    DEBUG = "Debug"
    RELEASE_SAFE = "ReleaseSafe"
    RELEASE_FAST = "ReleaseFast"
    RELEASE_SMALL = "ReleaseSmall"

    @property
    def is_debug(self) -> bool:
        """True for the unoptimized debug build"""
        return self is OptimizeMode.DEBUG


class FeatureToggles(BaseModel):
    """Independent build-time switches, fixed once at the top level"""
    model_config = ConfigDict(frozen=True)

    force_gl: bool = False
    """Force the desktop GL backend regardless of the platform default"""
    force_egl: bool = False
    """Use EGL instead of the native GL context mechanism where possible"""
    enable_x11: bool = True
    """Compile with X11 support (Linux)"""
    enable_wayland: bool = False
    """Compile with Wayland support (Linux)"""


class LibraryConfig(BaseModel):
    """Describes the static library built from the C sources"""
    name: str = "sokol"
    source_root: str = "src/sokol/c"
    sources: List[str]
    include_dirs: List[str] = Field(default_factory=list)

    @field_validator("sources")
    @classmethod
    def _sources_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("library needs at least one source unit")
        return value


class ExamplesConfig(BaseModel):
    """Describes the sample programs linked against the library"""
    source_root: str = "src/examples"
    source_suffix: str = ".c"
    names: List[str]


class ShadersConfig(BaseModel):
    """Describes the manually triggered shader compilation step"""
    tools_dir: str = "../sokol-tools-bin/bin"
    source_root: str = "src/examples/shaders"
    names: List[str]
    languages: List[str]
    output_format: str = "sokol"
    output_suffix: str = ".h"
    host_binaries: Dict[str, str] = Field(default_factory=dict)
    """Maps a host key (``linux``, ``windows``, ``macos-x86_64``, ``macos-aarch64``) to the binary path"""


class WebConfig(BaseModel):
    """Describes the Emscripten SDK bridge"""
    sdk_dir: Optional[str] = None
    sdk_version: str = "latest"
    marker_file: str = ".emscripten"
    output_subdir: str = "web"
    shell_file: str = "src/sokol/web/shell.html"
    debug_optimize_flag: str = "-Og"
    release_optimize_flag: str = "-Oz"
    link_flags: List[str] = Field(default_factory=list)


class BuildOptions(BaseModel):
    """Generic options that tune how the graph is executed"""
    jobs: Optional[int] = Field(default=None, ge=1)
    keep_going: bool = True
    out_dir: str = "build/out"
    cache_dir: str = "build/cache"


class BuildCatalog(BaseModel):
    """Complete contents of catalog.yaml"""
    library: LibraryConfig
    examples: ExamplesConfig
    shaders: ShadersConfig
    web: WebConfig = Field(default_factory=WebConfig)
    build_options: BuildOptions = Field(default_factory=BuildOptions)


class ToolchainDefaults(BaseModel):
    """Default compiler and archiver per host"""
    cc: str = "cc"
    ar: str = "ar"


class PlatformTable(BaseModel):
    """Complete contents of platforms.yaml"""
    optimize_cflags: Dict[OptimizeMode, List[str]]
    toolchains: Dict[str, ToolchainDefaults] = Field(default_factory=dict)
    cross_compiler: str = "clang"

    def cflags_for(self, mode: OptimizeMode) -> List[str]:
        """Returns the C compiler flags for an optimization mode"""
        return list(self.optimize_cflags.get(mode, []))

    def toolchain_for(self, host_os: str) -> ToolchainDefaults:
        """Returns the default toolchain for a host OS, falling back to ``default``"""
        if host_os in self.toolchains:
            return self.toolchains[host_os]
        return self.toolchains.get("default", ToolchainDefaults())
