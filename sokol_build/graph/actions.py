"""
Actions attached to build nodes and the runner that executes external commands
"""

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..sokol_types.exceptions import ExternalProcessError, SokolBuildError


class CommandRunner:
    """Runs external commands with logging and dry-run support"""

    def __init__(self, logger: Any, cwd: Optional[Path] = None, dry_run: bool = False):
        """
        Initialize the runner

        Args:
            logger: Logger instance
            cwd: Default working directory
            dry_run: If True, don't actually run commands
        """
        self.logger = logger
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.dry_run = dry_run
        self.env = os.environ.copy()

    def run(self,
            cmd: Sequence[Any],
            cwd: Optional[Path] = None,
            env: Optional[Dict[str, str]] = None,
            capture_output: bool = False) -> subprocess.CompletedProcess:
        """
        Run a command with logging

        Args:
            cmd: Command and arguments
            cwd: Working directory
            env: Environment variables
            capture_output: Capture stdout/stderr

        Returns:
            CompletedProcess instance

        Raises:
            ExternalProcessError: The command could not be started or exited non-zero
        """
        cmd = [str(c) for c in cmd]
        if cwd is None:
            cwd = self.cwd
        if env is None:
            env = self.env

        cmd_str = " ".join(cmd)
        self.logger.debug(f"Running: {cmd_str}")
        self.logger.debug(f"  in: {cwd}")

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would run: {cmd_str}")
            return subprocess.CompletedProcess(cmd, 0, "", "")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                env=env,
                check=False,
                capture_output=capture_output,
                text=True,
            )
        except FileNotFoundError as e:
            self.logger.error(f"Program not found: {cmd[0]}")
            raise ExternalProcessError(cmd, 127, f"Program not found: {cmd[0]}") from e

        if capture_output and result.stdout:
            self.logger.debug(f"Output: {result.stdout}")

        if result.returncode != 0:
            self.logger.error(f"Command failed: {cmd_str}")
            if result.stdout:
                self.logger.error(f"stdout: {result.stdout}")
            if result.stderr:
                self.logger.error(f"stderr: {result.stderr}")
            raise ExternalProcessError(cmd, result.returncode)

        return result


class Action(ABC):
    """Work performed by a build node"""

    returncode: Optional[int] = None

    @abstractmethod
    def execute(self, runner: CommandRunner) -> None:
        """Perform the action; raise on failure"""

    @abstractmethod
    def describe(self) -> List[str]:
        """Human readable command lines, one per external invocation"""


class CommandAction(Action):
    """Runs one external program"""

    def __init__(self,
                 cmd: Sequence[Any],
                 cwd: Optional[Path] = None,
                 env: Optional[Dict[str, str]] = None,
                 make_dirs: Iterable[Path] = ()):
        self.cmd = [str(c) for c in cmd]
        self.cwd = cwd
        self.env = env
        self.make_dirs = [Path(d) for d in make_dirs]
        self.returncode = None

    def execute(self, runner: CommandRunner) -> None:
        if not runner.dry_run:
            for directory in self.make_dirs:
                directory.mkdir(parents=True, exist_ok=True)
        try:
            result = runner.run(self.cmd, cwd=self.cwd, env=self.env)
        except ExternalProcessError as e:
            self.returncode = e.returncode
            raise
        self.returncode = result.returncode

    def describe(self) -> List[str]:
        return [" ".join(self.cmd)]


class SequenceAction(Action):
    """Runs several actions in order, stopping at the first failure"""

    def __init__(self, actions: Iterable[Action]):
        self.actions = list(actions)
        self.returncode = None

    def execute(self, runner: CommandRunner) -> None:
        for action in self.actions:
            try:
                action.execute(runner)
            finally:
                self.returncode = action.returncode

    def describe(self) -> List[str]:
        lines: List[str] = []
        for action in self.actions:
            lines.extend(action.describe())
        return lines


class FailAction(Action):
    """Always fails with a pre-computed error"""

    def __init__(self, error: SokolBuildError):
        self.error = error
        self.returncode = None

    def execute(self, runner: CommandRunner) -> None:
        raise self.error

    def describe(self) -> List[str]:
        return [f"<fails: {self.error}>"]


__all__ = ["CommandRunner", "Action", "CommandAction", "SequenceAction", "FailAction"]
