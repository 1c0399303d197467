"""List command - show worktrees of one project or all projects."""

from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.cli.output import user_output
from twiggit.core.context import TwiggitContext
from twiggit.core.worktree_manager import SortOrder, WorktreeListing


def _status_cell(item: WorktreeListing) -> str:
    if item.orphan:
        return "[red]orphan[/red]"
    if item.clean is None:
        return "[red]missing[/red]"
    if item.clean:
        return "[green]clean[/green]"
    return "[yellow]modified[/yellow]"


def _branch_cell(item: WorktreeListing) -> str:
    if item.detached:
        return "[dim](detached)[/dim]"
    name = item.branch or ""
    if item.is_main:
        return f"[bold]{name}[/bold] [dim](main checkout)[/dim]"
    return name


def _date_cell(item: WorktreeListing) -> str:
    if item.timestamp is None:
        return "-"
    return datetime.fromtimestamp(item.timestamp).strftime("%Y-%m-%d %H:%M")


@click.command("list")
@click.argument("project", required=False)
@click.option("-a", "--all", "all_projects", is_flag=True, help="List worktrees of every project.")
@click.option(
    "--sort",
    type=click.Choice(["name", "date"]),
    default="name",
    show_default=True,
    help="Sort by project/branch name or by newest commit.",
)
@click.pass_obj
@cli_error_boundary
def list_cmd(ctx: TwiggitContext, project: str | None, all_projects: bool, sort: str) -> None:
    """List worktrees.

    Uses the current project unless PROJECT or --all is given. Directories
    under the worktrees directory that git does not know about are shown
    as orphans.
    """
    context = ctx.detect_context()
    sort_order: SortOrder = "date" if sort == "date" else "name"
    listings = ctx.manager.list_worktrees(project, all_projects, context, sort_order)

    if not listings:
        user_output("No worktrees found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("project", style="cyan", no_wrap=True)
    table.add_column("branch", no_wrap=True)
    table.add_column("status", no_wrap=True)
    table.add_column("commit", no_wrap=True)
    table.add_column("path", no_wrap=True)

    for item in listings:
        commit = item.commit[:8] if item.commit else "-"
        if sort == "date":
            commit = f"{commit} {_date_cell(item)}"
        table.add_row(
            escape(item.project),
            _branch_cell(item),
            _status_cell(item),
            commit,
            escape(str(item.path)),
        )

    # Output table to stderr (consistent with user_output convention)
    console = Console(stderr=True, width=200)
    console.print(table)
