"""
Base builder class that all builders inherit from
"""

import shlex
from abc import ABC
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ..config import ConfigLoader
from ..graph import Action, BuildGraph, BuildNode, CommandAction, NodeKind, SequenceAction
from ..plan import BuildPlan
from ..platform import PlatformDetector
from ..utils import EnvironmentProbe


@dataclass(frozen=True)
class Toolchain:
    """C compiler and archiver used to produce objects and static libraries"""
    cc: List[str]
    ar: List[str]
    system_include_dirs: List[Path] = field(default_factory=list)

    @classmethod
    def for_plan(cls,
                 plan: BuildPlan,
                 config: ConfigLoader,
                 probe: EnvironmentProbe,
                 host_os: str) -> "Toolchain":
        """
        Pick the native toolchain for a plan

        CC and AR from the environment win. Otherwise the host default is used
        for native builds, and the cross compiler with ``--target`` for
        everything else.
        """
        defaults = config.platforms.toolchain_for(host_os)
        env_cc = probe.getenv("CC")
        env_ar = probe.getenv("AR")

        if env_cc:
            cc = shlex.split(env_cc)
        elif plan.target.is_native:
            cc = [defaults.cc]
        else:
            cc = [config.platforms.cross_compiler, f"--target={plan.target.triple}"]

        ar = shlex.split(env_ar) if env_ar else [defaults.ar]
        return cls(cc=cc, ar=ar)


@dataclass
class BuildContext:
    """Everything a builder needs to know about the current invocation"""
    plan: BuildPlan
    config: ConfigLoader
    root_dir: Path
    out_dir: Path
    cache_dir: Path
    logger: Any
    probe: EnvironmentProbe = field(default_factory=EnvironmentProbe)
    detector: PlatformDetector = field(default_factory=PlatformDetector)

    @property
    def host_os(self) -> str:
        return self.detector.detect()["platform"]


class BaseBuilder(ABC):
    """Base class for the builders that add nodes to the graph"""

    def __init__(self, context: BuildContext, toolchain: Optional[Toolchain] = None):
        """
        Initialize base builder

        Args:
            context: Build context
            toolchain: Toolchain used for compile and archive nodes
        """
        self.context = context
        self.plan = context.plan
        self.config = context.config
        self.logger = context.logger
        self.probe = context.probe
        self.root_dir = Path(context.root_dir)
        self.out_dir = Path(context.out_dir)
        self.cache_dir = Path(context.cache_dir)
        self.toolchain = toolchain

    def source_path(self, relative: str) -> Path:
        """Resolve a path from the catalog against the project root"""
        return self.root_dir / relative

    def object_path(self, owner: str, source: Path) -> Path:
        """Object file for a source compiled on behalf of ``owner``"""
        obj_suffix = ".obj" if self.plan.target.is_windows else ".o"
        return self.cache_dir / f"obj.{owner}" / f"{source.stem}{obj_suffix}"

    def include_args(self) -> List[str]:
        args: List[str] = []
        for include in self.config.catalog.library.include_dirs:
            args.extend(["-I", str(self.source_path(include))])
        for include in self.toolchain.system_include_dirs:
            args.extend(["-isystem", str(include)])
        return args

    def compile_action(self, source: Path, obj: Path, defines: Sequence[str] = ()) -> Action:
        """Compile one translation unit with the plan's flags"""
        cmd = list(self.toolchain.cc)
        cmd.extend(["-c", str(source), "-o", str(obj)])
        cmd.extend(self.config.platforms.cflags_for(self.plan.optimize))
        cmd.extend(self.include_args())
        cmd.extend(defines)
        cmd.extend(self.plan.flags.compiler_args())
        return CommandAction(cmd, cwd=self.root_dir, make_dirs=[obj.parent])

    def archive_action(self, objects: Sequence[Path], archive: Path) -> Action:
        """Bundle object files into a static library"""
        cmd = list(self.toolchain.ar) + ["rcs", str(archive)] + [str(o) for o in objects]
        return CommandAction(cmd, cwd=self.root_dir, make_dirs=[archive.parent])

    def static_library_node(self,
                            graph: BuildGraph,
                            name: str,
                            sources: Sequence[Path],
                            archive: Path,
                            defines: Sequence[str] = (),
                            description: Optional[str] = None) -> BuildNode:
        """One node that compiles sources and archives the objects"""
        objects = [self.object_path(name, src) for src in sources]
        actions = [self.compile_action(src, obj, defines) for src, obj in zip(sources, objects)]
        actions.append(self.archive_action(objects, archive))
        return graph.add(BuildNode(
            name=f"lib-{name}",
            kind=NodeKind.ARCHIVE,
            action=SequenceAction(actions),
            outputs=[archive] + objects,
            description=description or f"static library {archive.name}",
        ))
