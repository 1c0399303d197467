"""Output utilities for CLI commands with clear intent.

Human-readable text goes to stderr so that stdout carries only
machine-readable results such as the single path printed by ``cd``.
"""

from typing import Any

import click
from rich.panel import Panel
from rich.text import Text


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a message meant for a person (stderr)."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write a result meant for scripts and shell wrappers (stdout)."""
    click.echo(message, nl=nl)


def format_error(message: str, suggestion: str | None = None) -> str:
    lines = [click.style("Error: ", fg="red") + message]
    if suggestion:
        lines.append(click.style("Suggestion: ", fg="yellow") + suggestion)
    return "\n".join(lines)


def format_prune_summary(
    *, deleted: int, skipped: int, failed: int, would_delete: int, dry_run: bool
) -> Panel:
    """Format the final prune summary box.

    Example:
        >>> panel = format_prune_summary(deleted=2, skipped=1, failed=0, would_delete=0,
        ...                              dry_run=False)
        >>> Console(stderr=True).print(panel)
    """
    lines: list[Text] = []
    if dry_run:
        lines.append(Text(f"Would delete: {would_delete}", style="cyan"))
    else:
        lines.append(Text(f"Deleted: {deleted}", style="green"))
    lines.append(Text(f"Skipped: {skipped}", style="yellow"))
    if failed:
        lines.append(Text(f"Failed: {failed}", style="red bold"))

    content = Text("\n").join(lines)
    if failed:
        title, border = "Prune Finished With Errors", "red"
    elif dry_run:
        title, border = "Prune Preview", "cyan"
    else:
        title, border = "Prune Complete", "green"
    return Panel(content, title=title, border_style=border, padding=(0, 2))
