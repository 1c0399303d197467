"""Yes/no confirmation prompts."""

from abc import ABC, abstractmethod
from typing import TextIO

import click

ACCEPTED_ANSWERS = frozenset({"y", "yes"})


def is_affirmative(answer: str) -> bool:
    """Only an explicit 'y' or 'yes' (any case) confirms. Empty input declines."""
    return answer.strip().lower() in ACCEPTED_ANSWERS


class Confirmation(ABC):
    """Asks the user to confirm a destructive operation."""

    @abstractmethod
    def confirm(self, prompt: str) -> bool:
        """Show ``prompt`` and return True only if the user accepts."""
        ...


class StreamConfirmation(Confirmation):
    """Reads exactly one line from an input stream.

    The prompt is written to stderr so that stdout stays reserved for
    machine-readable output.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def confirm(self, prompt: str) -> bool:
        click.echo(prompt, nl=False, err=True)
        stream = self._stream if self._stream is not None else click.get_text_stream("stdin")
        line = stream.readline()
        if not line:
            click.echo(err=True)
        return is_affirmative(line)
