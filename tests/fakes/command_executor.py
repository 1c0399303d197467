"""Fake CommandExecutor implementation for testing."""

from collections.abc import Sequence
from pathlib import Path

from twiggit.core.subprocess import CommandExecutor, CommandResult


class FakeCommandExecutor(CommandExecutor):
    """Replays scripted results keyed by the command's arguments.

    Commands without a scripted result succeed with empty output. Scripted
    exceptions are raised instead of returning, to simulate timeouts and
    missing executables.
    """

    def __init__(
        self,
        *,
        results: dict[tuple[str, ...], CommandResult] | None = None,
        errors: dict[tuple[str, ...], Exception] | None = None,
    ) -> None:
        self._results = dict(results or {})
        self._errors = dict(errors or {})
        self._calls: list[tuple[tuple[str, ...], Path | None, float]] = []

    @property
    def calls(self) -> list[tuple[tuple[str, ...], Path | None, float]]:
        """(args, cwd, timeout) for every run() call."""
        return self._calls

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [args for args, _, _ in self._calls]

    def run(self, args: Sequence[str], *, cwd: Path | None, timeout: float) -> CommandResult:
        key = tuple(args)
        self._calls.append((key, cwd, timeout))
        if key in self._errors:
            raise self._errors[key]
        if key in self._results:
            return self._results[key]
        return CommandResult(args=key, returncode=0, stdout="", stderr="")


def result(
    args: Sequence[str], *, returncode: int = 0, stdout: str = "", stderr: str = ""
) -> CommandResult:
    return CommandResult(args=tuple(args), returncode=returncode, stdout=stdout, stderr=stderr)
