import subprocess
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sokol_build.backend import BackendRequest
from sokol_build.builders import BuildContext
from sokol_build.config import ConfigLoader
from sokol_build.graph import CommandRunner
from sokol_build.plan import make_plan
from sokol_build.platform import PlatformDetector, resolve_target
from sokol_build.sokol_types.configuration import FeatureToggles, OptimizeMode
from sokol_build.sokol_types.exceptions import ExternalProcessError
from sokol_build.utils import EnvironmentProbe, Logger


class FakeProbe(EnvironmentProbe):
    """Environment probe backed by in-memory tables"""

    def __init__(self,
                 existing: Iterable[Path] = (),
                 programs: Optional[Dict[str, str]] = None,
                 env: Optional[Dict[str, str]] = None,
                 cpus: int = 4):
        self.existing = {Path(p) for p in existing}
        self.programs = programs or {}
        self.env = env or {}
        self.cpus = cpus

    def exists(self, path: Path) -> bool:
        return Path(path) in self.existing

    def which(self, program: str) -> Optional[str]:
        return self.programs.get(program)

    def getenv(self, name: str) -> Optional[str]:
        return self.env.get(name)

    def cpu_count(self) -> int:
        return self.cpus


class FakeDetector(PlatformDetector):
    """Host detector pinned to a given OS and architecture"""

    def __init__(self, os_name: str = "linux", arch: str = "x86_64"):
        self.os_name = os_name
        self.arch = arch

    def _get_platform_name(self) -> str:
        return self.os_name

    def _get_architecture(self) -> str:
        return self.arch


class RecordingRunner(CommandRunner):
    """Records commands instead of running them; programs in ``failures`` exit non-zero"""

    def __init__(self, logger, failures: Optional[Dict[str, int]] = None):
        super().__init__(logger)
        self.failures = failures or {}
        self.commands: List[List[str]] = []

    def run(self, cmd, cwd=None, env=None, capture_output=False):
        cmd = [str(c) for c in cmd]
        self.commands.append(cmd)
        for program, code in self.failures.items():
            if cmd[0].endswith(program):
                raise ExternalProcessError(cmd, code)
        return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def logger():
    return Logger(verbose=True, name="sokol_build.tests")


@pytest.fixture
def config():
    return ConfigLoader()


@pytest.fixture
def make_context(tmp_path, logger, config):
    def _make(target: str = "x86_64-linux-gnu",
              toggles: Optional[FeatureToggles] = None,
              request: BackendRequest = BackendRequest.AUTO,
              optimize: OptimizeMode = OptimizeMode.DEBUG,
              probe: Optional[EnvironmentProbe] = None,
              detector: Optional[PlatformDetector] = None,
              native: bool = True) -> BuildContext:
        detector = detector or FakeDetector()
        plan = make_plan(
            resolve_target(target, native=native),
            toggles or FeatureToggles(),
            request=request,
            optimize=optimize,
        )
        return BuildContext(
            plan=plan,
            config=config,
            root_dir=tmp_path,
            out_dir=tmp_path / "build" / "out",
            cache_dir=tmp_path / "build" / "cache",
            logger=logger,
            probe=probe or FakeProbe(),
            detector=detector,
        )

    return _make
