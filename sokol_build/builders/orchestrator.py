"""
Build orchestrator that assembles the whole build graph
"""

import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..graph import BuildGraph, BuildNode, CommandRunner, ExecutionReport, GraphScheduler
from .base_builder import BuildContext, Toolchain
from .emscripten_builder import EmscriptenBuilder
from .example_builder import ExampleBuilder, run_step_name
from .library_builder import LibraryBuilder
from .shader_builder import SHADERS_STEP, ShaderBuilder

INSTALL_STEP = "install"


class BuildOrchestrator:
    """Builds the graph for one plan and runs requested steps through the scheduler"""

    def __init__(self,
                 context: BuildContext,
                 sdk_dir: Optional[Path] = None,
                 dry_run: bool = False):
        """
        Initialize build orchestrator

        Args:
            context: Build context shared by every builder
            sdk_dir: Explicit Emscripten SDK root
            dry_run: If True, log commands instead of running them
        """
        self.context = context
        self.plan = context.plan
        self.config = context.config
        self.logger = context.logger
        self.dry_run = dry_run

        self.bridge: Optional[EmscriptenBuilder] = None
        if self.plan.target.is_wasm:
            self.bridge = EmscriptenBuilder(context, sdk_dir=sdk_dir)
            self.toolchain = self.bridge.toolchain
        else:
            self.toolchain = Toolchain.for_plan(
                self.plan, self.config, context.probe, context.host_os
            )

        self.graph = self._build_graph()

    def _build_graph(self) -> BuildGraph:
        graph = BuildGraph()
        install = graph.step(INSTALL_STEP, "Build the library and all samples (default)")

        sdk_setup = self.bridge.setup_node(graph) if self.bridge else None
        library = LibraryBuilder(self.context, self.toolchain).build(graph, sdk_setup)
        install.depend_on(library)

        samples = ExampleBuilder(self.context, self.toolchain, self.bridge)
        install.depend_on(*samples.build(graph, library))

        ShaderBuilder(self.context).build(graph)

        self.logger.debug(f"Build graph: {len(graph.nodes)} nodes, {len(graph.steps)} steps")
        return graph

    def plan_steps(self, steps: List[str]) -> List[BuildNode]:
        """Nodes the given steps need, in dependency order"""
        return self.graph.plan(steps)

    def run_steps(self, steps: List[str], jobs: int = 1, keep_going: bool = True) -> ExecutionReport:
        """
        Execute the transitive closure of the given steps

        Args:
            steps: Step names
            jobs: Maximum number of concurrently running nodes
            keep_going: Keep building independent nodes after a failure

        Returns:
            ExecutionReport
        """
        nodes = self.plan_steps(steps)
        self.logger.info(f"Steps {', '.join(steps)}: {len(nodes)} nodes with {jobs} job{'s' if jobs != 1 else ''}")
        runner = CommandRunner(self.logger, cwd=self.context.root_dir, dry_run=self.dry_run)
        scheduler = GraphScheduler(runner, self.logger, jobs=jobs, keep_going=keep_going)
        return scheduler.execute(nodes)

    def run_sample(self, name: str, jobs: int = 1) -> int:
        """
        Build and run one sample

        Returns:
            Exit code of the sample (or of emrun for web targets)
        """
        step = self.graph.get_step(run_step_name(name))
        report = self.run_steps([step.name], jobs=jobs, keep_going=False)
        launcher = step.dependencies[-1]
        return report.exit_code(launcher.name)

    def list_steps(self) -> Dict[str, str]:
        return {name: step.description for name, step in self.graph.steps.items()}

    def clean_all(self) -> None:
        """Remove the output and cache directories"""
        for directory in (self.context.out_dir, self.context.cache_dir):
            directory = Path(directory)
            if not directory.exists():
                continue
            if self.dry_run:
                self.logger.info(f"[DRY RUN] Would remove {directory}")
                continue
            self.logger.info(f"Removing {directory}")
            shutil.rmtree(directory, ignore_errors=True)

    def get_build_info(self) -> Dict[str, Any]:
        """
        Get information about the configured build

        Returns:
            Dictionary with plan, toolchain and graph details
        """
        info = self.plan.describe()
        info.update({
            "cc": " ".join(self.toolchain.cc),
            "ar": " ".join(self.toolchain.ar),
            "out_dir": str(self.context.out_dir),
            "cache_dir": str(self.context.cache_dir),
            "nodes": len(self.graph.nodes),
            "steps": sorted(self.graph.steps),
        })
        if self.bridge:
            info["emsdk"] = str(self.bridge.sdk_root) if self.bridge.sdk_root else None
        shaders = self.graph.steps.get(SHADERS_STEP)
        info["shader_nodes"] = len(shaders.dependencies) if shaders else 0
        return info
