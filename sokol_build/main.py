#!/usr/bin/env python3
"""
Main entry point for the sokol build system
Builds the sokol library, its samples and shaders for native and web targets
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .backend import BackendRequest
from .builders import BuildContext, BuildOrchestrator, INSTALL_STEP
from .builders.shader_builder import SHADERS_STEP
from .config import ConfigLoader
from .graph import ExecutionReport
from .plan import make_plan
from .platform import PlatformDetector, resolve_build_target
from .sokol_types.configuration import FeatureToggles, OptimizeMode
from .sokol_types.exceptions import ConfigurationError, SokolBuildError
from .utils import EnvironmentProbe, Logger

JOBS_ENV = "SOKOL_BUILD_MAX_JOBS"


class BuildSystem:
    """Main build system class"""

    def __init__(self,
                 root_dir: Optional[Path] = None,
                 out_dir: Optional[Path] = None,
                 target: Optional[str] = None,
                 optimize: OptimizeMode = OptimizeMode.DEBUG,
                 backend: str = "auto",
                 toggles: Optional[FeatureToggles] = None,
                 sdk_dir: Optional[Path] = None,
                 jobs: Optional[int] = None,
                 config_dir: Optional[Path] = None,
                 verbose: bool = False,
                 dry_run: bool = False,
                 log_file: Optional[str] = None,
                 logger: Optional[Logger] = None,
                 probe: Optional[EnvironmentProbe] = None,
                 detector: Optional[PlatformDetector] = None):
        """
        Initialize the build system

        Args:
            root_dir: Project root directory
            out_dir: Output directory for libraries, executables and web bundles
            target: Target triple, ``native`` or None to detect
            optimize: Optimization mode
            backend: Requested backend name or ``auto``
            toggles: Feature toggles
            sdk_dir: Emscripten SDK root
            jobs: Maximum number of parallel jobs
            config_dir: Directory holding catalog.yaml and platforms.yaml
            verbose: Enable verbose output
            dry_run: Log commands without running them
            log_file: Optional log file path

        Raises:
            ConfigurationError: The requested combination can never build
        """
        self.root_dir = Path(root_dir or Path.cwd()).resolve()
        self.verbose = verbose
        self.dry_run = dry_run
        self.probe = probe or EnvironmentProbe()
        self.detector = detector or PlatformDetector()

        # Setup logging
        self.logger = logger or Logger(verbose=verbose, log_file=log_file)

        self.config = ConfigLoader(config_dir)

        if out_dir is None:
            out_dir = self.root_dir / self.config.get_option("out_dir", "build/out")
        self.out_dir = Path(out_dir)
        self.cache_dir = self.root_dir / self.config.get_option("cache_dir", "build/cache")

        target_desc = resolve_build_target(target, self.detector)
        self.plan = make_plan(
            target_desc,
            toggles or FeatureToggles(),
            request=BackendRequest.parse(backend),
            optimize=optimize,
        )
        self.logger.info(
            f"Target: {target_desc.triple} ({target_desc.classification.value}), "
            f"backend: {self.plan.backend.value}, optimize: {optimize.value}"
        )
        self.logger.debug(f"Host: {self.detector.detect()}")

        self.jobs = self._resolve_jobs(jobs)

        context = BuildContext(
            plan=self.plan,
            config=self.config,
            root_dir=self.root_dir,
            out_dir=self.out_dir,
            cache_dir=self.cache_dir,
            logger=self.logger,
            probe=self.probe,
            detector=self.detector,
        )
        self.orchestrator = BuildOrchestrator(context, sdk_dir=sdk_dir, dry_run=dry_run)

    def _resolve_jobs(self, jobs: Optional[int]) -> int:
        if jobs is not None:
            if jobs < 1:
                raise ConfigurationError(f"--jobs must be at least 1 (got {jobs})")
            return jobs

        env_value = self.probe.getenv(JOBS_ENV)
        if env_value:
            try:
                env_jobs = int(env_value)
                if env_jobs > 0:
                    return env_jobs
            except ValueError:
                pass
            self.logger.warning(f"Ignoring invalid {JOBS_ENV}='{env_value}'")

        configured = self.config.get_option("jobs")
        if configured:
            return configured
        return self.probe.cpu_count()

    def _report(self, report: ExecutionReport) -> bool:
        if report.succeeded:
            self.logger.success(f"{len(report.states)} nodes built successfully")
            return True
        for name in report.failed:
            self.logger.error(f"Failed: {name}: {report.errors.get(name)}")
        if report.skipped:
            self.logger.warning(f"Skipped {len(report.skipped)} nodes: {', '.join(report.skipped)}")
        return False

    def build(self, steps: Optional[List[str]] = None) -> bool:
        """
        Build the given steps (the default install step when none are given)

        Returns:
            True if every node succeeded
        """
        steps = steps or [INSTALL_STEP]
        keep_going = self.config.get_option("keep_going", True)
        report = self.orchestrator.run_steps(steps, jobs=self.jobs, keep_going=keep_going)
        return self._report(report)

    def run(self, sample: str) -> int:
        """
        Build and run one sample

        Returns:
            The sample's exit code
        """
        if not self.config.has_example(sample):
            raise ConfigurationError(
                f"Unknown sample: {sample} (available: {', '.join(self.config.get_examples())})"
            )
        code = self.orchestrator.run_sample(sample, jobs=self.jobs)
        if code != 0:
            self.logger.error(f"{sample} exited with code {code}")
        return code

    def shaders(self) -> bool:
        return self.build([SHADERS_STEP])

    def clean(self) -> None:
        self.logger.info("Cleaning build artifacts...")
        self.orchestrator.clean_all()

    def show_steps(self) -> None:
        for name, description in self.orchestrator.list_steps().items():
            self.logger.raw(f"  {name:24} {description}")

    def show_info(self) -> None:
        """Show build system information"""
        from . import __version__

        info = self.orchestrator.get_build_info()
        self.logger.raw(f"\nSokol Build System v{__version__}")
        self.logger.raw(f"{'='*50}")
        self.logger.raw(f"Target: {info['target']} ({info['classification']})")
        self.logger.raw(f"Backend: {info['backend']}")
        self.logger.raw(f"Optimize: {info['optimize']}")
        self.logger.raw(f"Compiler: {info['cc']}")
        self.logger.raw(f"Archiver: {info['ar']}")
        if "emsdk" in info:
            self.logger.raw(f"Emscripten SDK: {info['emsdk'] or 'not found'}")
        self.logger.raw(f"Root Directory: {self.root_dir}")
        self.logger.raw(f"Output Directory: {info['out_dir']}")
        self.logger.raw(f"Jobs: {self.jobs}")
        self.logger.raw(f"\nCompile flags: {' '.join(info['cflags']) or '(none)'}")
        self.logger.raw(f"Link set: {' '.join(info['link_set']) or '(none)'}")
        self.logger.raw(f"\nSamples ({len(self.config.get_examples())}):")
        for name in self.config.get_examples():
            self.logger.raw(f"  - {name}")
        self.logger.raw(f"\nGraph: {info['nodes']} nodes, {len(info['steps'])} steps, "
                        f"{info['shader_nodes']} shader nodes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sokol-build",
        description="Sokol Build System - library, samples and shaders for native and web targets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s build                               # Build the library and all samples
  %(prog)s build --target wasm32-emscripten    # Build the web bundles
  %(prog)s run triangle                        # Build and run one sample
  %(prog)s shaders                             # Compile shaders with sokol-shdc
  %(prog)s steps                               # List the available steps
  %(prog)s info                                # Show build information
        """
    )

    parser.add_argument(
        "command",
        choices=["build", "run", "shaders", "steps", "info", "clean"],
        help="Command to execute"
    )

    parser.add_argument(
        "sample",
        nargs="?",
        help="Sample to run (run command only)"
    )

    parser.add_argument(
        "--step",
        action="append",
        help="Step to build (can be used multiple times, default: install)"
    )

    parser.add_argument(
        "--target",
        help="Target triple, e.g. x86_64-linux-gnu or wasm32-emscripten (default: host)"
    )

    parser.add_argument(
        "--optimize",
        choices=[mode.value for mode in OptimizeMode],
        default=OptimizeMode.DEBUG.value,
        help="Optimization mode (default: Debug)"
    )

    parser.add_argument(
        "--backend",
        choices=[request.value for request in BackendRequest],
        default=BackendRequest.AUTO.value,
        help="Graphics backend (default: platform default)"
    )

    parser.add_argument(
        "--gl",
        action="store_true",
        help="Force the OpenGL backend"
    )

    parser.add_argument(
        "--wayland",
        action="store_true",
        help="Compile with Wayland support (Linux)"
    )

    parser.add_argument(
        "--x11",
        dest="x11",
        action="store_true",
        help="Compile with X11 support (Linux, default)"
    )

    parser.add_argument(
        "--no-x11",
        dest="x11",
        action="store_false",
        help="Compile without X11 support (Linux)"
    )

    parser.add_argument(
        "--egl",
        action="store_true",
        help="Use EGL instead of the native GL context (Linux)"
    )

    parser.add_argument(
        "--emsdk",
        type=Path,
        help="Emscripten SDK root (default: $EMSDK or deps/emsdk)"
    )

    parser.add_argument(
        "--jobs", "-j",
        type=int,
        help=f"Parallel jobs (default: ${JOBS_ENV} or CPU count)"
    )

    parser.add_argument(
        "--root-dir",
        type=Path,
        help="Project root directory (default: current directory)"
    )

    parser.add_argument(
        "--out-dir",
        type=Path,
        help="Output directory (default: build/out under the root)"
    )

    parser.add_argument(
        "--log-file",
        help="Also write the log to this file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log commands without running them"
    )

    parser.set_defaults(x11=True)
    return parser


def main(argv: Optional[List[str]] = None):
    """Command-line interface"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate arguments
    if args.command == "run" and not args.sample:
        parser.error("run needs the name of a sample")
    if args.command != "run" and args.sample:
        parser.error(f"unexpected argument for {args.command}: {args.sample}")

    logger = Logger(verbose=args.verbose, log_file=args.log_file)

    # Initialize build system
    try:
        bs = BuildSystem(
            root_dir=args.root_dir,
            out_dir=args.out_dir,
            target=args.target,
            optimize=OptimizeMode(args.optimize),
            backend=args.backend,
            toggles=FeatureToggles(
                force_gl=args.gl,
                force_egl=args.egl,
                enable_x11=args.x11,
                enable_wayland=args.wayland,
            ),
            sdk_dir=args.emsdk,
            jobs=args.jobs,
            verbose=args.verbose,
            dry_run=args.dry_run,
            logger=logger,
        )
    except SokolBuildError as e:
        logger.error(str(e))
        sys.exit(1)

    # Execute command
    try:
        if args.command == "build":
            success = bs.build(args.step)
            sys.exit(0 if success else 1)

        elif args.command == "run":
            sys.exit(bs.run(args.sample))

        elif args.command == "shaders":
            success = bs.shaders()
            sys.exit(0 if success else 1)

        elif args.command == "steps":
            bs.show_steps()

        elif args.command == "info":
            bs.show_info()

        elif args.command == "clean":
            bs.clean()

    except KeyboardInterrupt:
        print("\nBuild interrupted by user", file=sys.stderr)
        sys.exit(130)
    except SokolBuildError as e:
        logger.error(str(e))
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
