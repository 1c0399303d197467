"""Command execution with timeouts.

The executor is the only place twiggit spawns processes. It never raises on a
non-zero exit code; callers inspect ``CommandResult.returncode`` and translate
failures into domain errors themselves.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from twiggit.core.errors import GitExecutionError, GitTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single command invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandExecutor(ABC):
    """Abstract interface for running external commands."""

    @abstractmethod
    def run(self, args: Sequence[str], *, cwd: Path | None, timeout: float) -> CommandResult:
        """Run a command and capture its output.

        Args:
            args: Command and arguments
            cwd: Working directory (None uses the process cwd)
            timeout: Seconds before the process is killed

        Returns:
            CommandResult with exit code and decoded output

        Raises:
            GitTimeoutError: If the command exceeds the timeout
            GitExecutionError: If the executable cannot be started
        """
        ...


class RealCommandExecutor(CommandExecutor):
    """Production implementation using subprocess.run()."""

    def run(self, args: Sequence[str], *, cwd: Path | None, timeout: float) -> CommandResult:
        cmd = [str(arg) for arg in args]
        logger.debug("Running %s (cwd=%s, timeout=%s)", " ".join(cmd), cwd, timeout)
        try:
            completed = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            # subprocess.run kills the child before re-raising
            raise GitTimeoutError(cmd, timeout) from e
        except FileNotFoundError as e:
            raise GitExecutionError(f"run {cmd[0]}", f"{cmd[0]} executable not found") from e
        except NotADirectoryError as e:
            raise GitExecutionError(f"run {cmd[0]}", f"not a directory: {cwd}") from e

        logger.debug("Exit code %d for %s", completed.returncode, " ".join(cmd))
        return CommandResult(
            args=tuple(cmd),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
