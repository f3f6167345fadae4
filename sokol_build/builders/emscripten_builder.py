"""
Emscripten SDK bridge: one-time SDK setup, emcc link and emrun launch
"""

from pathlib import Path
from typing import List, Optional

from ..graph import BuildGraph, BuildNode, CommandAction, FailAction, NodeKind
from ..sokol_types.exceptions import ToolchainEnvironmentError
from .base_builder import BaseBuilder, BuildContext, Toolchain


class EmscriptenBuilder(BaseBuilder):
    """
    Drives the Emscripten SDK for web targets.

    The SDK root is resolved once from (in order) the explicit path, the
    EMSDK environment variable, the catalog default, and an ``emsdk`` program
    on PATH. The ``.emscripten`` marker inside the root records that the SDK
    has been installed and activated.
    """

    def __init__(self, context: BuildContext, sdk_dir: Optional[Path] = None):
        super().__init__(context)
        self.web = self.config.catalog.web
        self.windows_host = context.host_os == "windows"
        self.emsdk_program: Optional[str] = None
        self.sdk_root = self._resolve_sdk_root(sdk_dir)
        self.toolchain = Toolchain(
            cc=[self.tool_path("emcc")],
            ar=[self.tool_path("emar")],
            system_include_dirs=[self.system_include_dir] if self.sdk_root else [],
        )
        self._setup_node: Optional[BuildNode] = None
        self._setup_resolved = False

    def _resolve_sdk_root(self, sdk_dir: Optional[Path]) -> Optional[Path]:
        candidates: List[Path] = []
        if sdk_dir:
            candidates.append(Path(sdk_dir))
        env_sdk = self.probe.getenv("EMSDK")
        if env_sdk:
            candidates.append(Path(env_sdk))
        if self.web.sdk_dir:
            candidates.append(self.source_path(self.web.sdk_dir))

        for candidate in candidates:
            if self.probe.exists(candidate):
                self.logger.debug(f"Using Emscripten SDK at {candidate}")
                return candidate
            self.logger.debug(f"Emscripten SDK not found at {candidate}")

        system_emsdk = self.probe.which("emsdk")
        if system_emsdk:
            self.emsdk_program = system_emsdk
            self.logger.debug(f"Using system emsdk: {system_emsdk}")
            return Path(system_emsdk).parent
        return None

    @property
    def marker_path(self) -> Optional[Path]:
        if self.sdk_root is None:
            return None
        return self.sdk_root / self.web.marker_file

    @property
    def system_include_dir(self) -> Path:
        return self.sdk_root / "upstream" / "emscripten" / "cache" / "sysroot" / "include"

    @property
    def web_dir(self) -> Path:
        return self.out_dir / self.web.output_subdir

    def tool_path(self, tool: str) -> str:
        """An Emscripten tool from PATH, falling back to the SDK's copy"""
        found = self.probe.which(tool)
        if found:
            return found
        if self.sdk_root is None:
            return tool
        suffix = ".bat" if self.windows_host else ""
        return str(self.sdk_root / "upstream" / "emscripten" / f"{tool}{suffix}")

    def bundle_path(self, name: str) -> Path:
        return self.web_dir / f"{name}.html"

    def _emsdk_command(self) -> List[str]:
        if self.emsdk_program:
            return [self.emsdk_program]
        if self.windows_host:
            return [str(self.sdk_root / "emsdk.bat")]
        return ["bash", str(self.sdk_root / "emsdk")]

    def setup_node(self, graph: BuildGraph) -> Optional[BuildNode]:
        """
        Add the one-time SDK install/activate nodes

        Returns:
            The node later work has to depend on, or None when the SDK is
            already set up
        """
        if self._setup_resolved:
            return self._setup_node
        self._setup_resolved = True

        if self.sdk_root is None:
            error = ToolchainEnvironmentError(
                "Emscripten SDK not found: pass --emsdk, set EMSDK, or put emsdk on PATH"
            )
            self.logger.error(str(error))
            self._setup_node = graph.add(BuildNode(
                name="emsdk-setup",
                kind=NodeKind.SDK_INSTALL,
                action=FailAction(error),
                description="Emscripten SDK setup",
            ))
            return self._setup_node

        if self.probe.exists(self.marker_path):
            self.logger.debug(f"Emscripten SDK already set up ({self.marker_path})")
            return None

        self.logger.info(f"Emscripten SDK at {self.sdk_root} needs setup")
        emsdk = self._emsdk_command()
        install = graph.add(BuildNode(
            name="emsdk-install",
            kind=NodeKind.SDK_INSTALL,
            action=CommandAction(emsdk + ["install", self.web.sdk_version], cwd=self.sdk_root),
            description=f"emsdk install {self.web.sdk_version}",
        ))
        activate = graph.add(BuildNode(
            name="emsdk-activate",
            kind=NodeKind.SDK_ACTIVATE,
            action=CommandAction(emsdk + ["activate", self.web.sdk_version], cwd=self.sdk_root),
            description=f"emsdk activate {self.web.sdk_version}",
        ))
        activate.depend_on(install)
        self._setup_node = activate
        return activate

    def link_node(self,
                  graph: BuildGraph,
                  name: str,
                  library: BuildNode,
                  main: BuildNode) -> BuildNode:
        """
        Add an emcc link node producing ``<web>/<name>.html``

        Args:
            graph: Graph to add to
            name: Sample name
            library: Node producing the library archive
            main: Node producing the sample archive
        """
        if self.plan.optimize.is_debug:
            opt = self.web.debug_optimize_flag
        else:
            opt = self.web.release_optimize_flag

        bundle = self.bundle_path(name)
        cmd = [self.tool_path("emcc"), opt]
        cmd.extend(self.web.link_flags)
        cmd.append(f"--shell-file={self.source_path(self.web.shell_file)}")
        cmd.append(f"-o{bundle}")
        cmd.extend([str(library.output), str(main.output)])

        node = graph.add(BuildNode(
            name=f"emcc-{name}",
            kind=NodeKind.EMCC_LINK,
            action=CommandAction(cmd, cwd=self.root_dir, make_dirs=[self.web_dir]),
            outputs=[bundle],
            description=f"emcc link {bundle.name}",
        ))
        node.depend_on(self.setup_node(graph), library, main)
        return node

    def run_node(self, graph: BuildGraph, name: str, link: BuildNode) -> BuildNode:
        """Add an emrun node serving the linked bundle in a browser"""
        cmd = [self.tool_path("emrun"), str(self.bundle_path(name))]
        node = graph.add(BuildNode(
            name=f"emrun-{name}",
            kind=NodeKind.EMRUN,
            action=CommandAction(cmd, cwd=self.root_dir),
            description=f"emrun {name}",
        ))
        node.depend_on(link)
        return node
