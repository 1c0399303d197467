"""Delete command - remove a worktree and its branch."""

import click

from twiggit.cli.completions import complete_existing_targets
from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.cli.output import machine_output, user_output
from twiggit.core.context import TwiggitContext
from twiggit.core.worktree_manager import DeleteOptions


@click.command("delete")
@click.argument(
    "target",
    metavar="[BRANCH|PROJECT/BRANCH]",
    default="",
    shell_complete=complete_existing_targets,
)
@click.option("-f", "--force", is_flag=True, help="Delete even with uncommitted changes.")
@click.option("--keep-branch", is_flag=True, help="Keep the git branch after removal.")
@click.option(
    "--merged-only",
    is_flag=True,
    help="Refuse unless the branch is merged into the default branch.",
)
@click.option(
    "-C",
    "--change-dir",
    is_flag=True,
    help="Allow deleting the current worktree and print where to cd afterwards.",
)
@click.pass_obj
@cli_error_boundary
def delete_cmd(
    ctx: TwiggitContext,
    target: str,
    force: bool,
    keep_branch: bool,
    merged_only: bool,
    change_dir: bool,
) -> None:
    """Delete a worktree.

    Without a target, deletes the worktree you are standing in (requires -C).
    The branch is deleted too unless --keep-branch is given; git refuses to
    delete unmerged branches, which is reported as a warning.
    """
    context = ctx.detect_context()
    project, branch = ctx.target_resolver.resolve_branch(context, target)
    options = DeleteOptions(
        force=force, keep_branch=keep_branch, merged_only=merged_only, change_dir=change_dir
    )
    result = ctx.manager.delete(project.name, branch, options, context)

    user_output(
        click.style("✓ ", fg="green")
        + f"Deleted worktree {click.style(f'{project.name}/{branch}', fg='cyan', bold=True)}"
    )
    if result.branch_deleted:
        user_output(f"  Deleted branch {branch}")
    if result.branch_delete_warning is not None:
        user_output(click.style("  Warning: ", fg="yellow") + result.branch_delete_warning)

    if change_dir and result.navigation_path is not None:
        machine_output(str(result.navigation_path))
