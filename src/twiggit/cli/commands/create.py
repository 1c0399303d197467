"""Create command - add a worktree for a branch."""

import click

from twiggit.cli.completions import complete_branch_targets
from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.cli.output import machine_output, user_output
from twiggit.core.context import TwiggitContext


@click.command("create")
@click.argument("target", metavar="BRANCH|PROJECT/BRANCH", shell_complete=complete_branch_targets)
@click.option(
    "--source",
    "source_branch",
    default=None,
    help="Branch to create the new branch from (defaults to default_source_branch).",
)
@click.option("--cd", "print_path", is_flag=True, help="Print only the new worktree path.")
@click.pass_obj
@cli_error_boundary
def create_cmd(
    ctx: TwiggitContext, target: str, source_branch: str | None, print_path: bool
) -> None:
    """Create a worktree at WORKTREES_DIR/PROJECT/BRANCH.

    An existing local branch is checked out; otherwise a new branch is
    created from --source.

    Examples:
      twiggit create feature-x              # inside a project
      twiggit create acme/feature-x --source develop
    """
    context = ctx.detect_context()
    project, branch = ctx.target_resolver.resolve_branch(context, target)
    info = ctx.manager.create(project.name, branch, source_branch)

    if print_path:
        machine_output(str(info.path))
        return

    user_output(
        click.style("✓ ", fg="green")
        + f"Created worktree {click.style(f'{project.name}/{branch}', fg='cyan', bold=True)}"
    )
    user_output(f"  {info.path}")
