"""Prune command - remove worktrees whose branches are merged."""

import click
from rich.console import Console

from twiggit.cli.completions import complete_existing_targets
from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.cli.output import format_prune_summary, machine_output, user_output
from twiggit.core.context import TwiggitContext
from twiggit.core.target_resolver import check_target_syntax
from twiggit.core.worktree_manager import PruneOptions, PruneOutcome, PruneReport, PruneScope


def _label(outcome: PruneOutcome) -> str:
    branch = outcome.branch if outcome.branch is not None else outcome.path.name
    return f"{outcome.project}/{branch}"


def _print_report(report: PruneReport, dry_run: bool) -> None:
    if dry_run:
        user_output("Dry run - no changes made:")
        if report.candidates:
            user_output(f"\nWould delete {len(report.candidates)} worktree(s):")
            for outcome in report.candidates:
                user_output(f"  {outcome.path} ({_label(outcome)})")

    if report.deleted:
        user_output(f"\nDeleted {len(report.deleted)} worktree(s):")
        for outcome in report.deleted:
            user_output(f"  {outcome.path} ({_label(outcome)})")
            if outcome.branch_deleted:
                user_output(f"    branch deleted: {outcome.branch}")
            if outcome.reason:
                user_output(click.style("    warning: ", fg="yellow") + outcome.reason)

    if report.skipped:
        user_output(f"\nSkipped {len(report.skipped)} worktree(s):")
        for outcome in report.skipped:
            user_output(f"  {_label(outcome)}: {outcome.reason}")

    if report.failed:
        user_output(click.style(f"\nFailed {len(report.failed)} worktree(s):", fg="red"))
        for outcome in report.failed:
            user_output(f"  {_label(outcome)}: {outcome.reason}")

    Console(stderr=True).print(
        format_prune_summary(
            deleted=len(report.deleted),
            skipped=len(report.skipped),
            failed=len(report.failed),
            would_delete=len(report.candidates),
            dry_run=dry_run,
        )
    )


@click.command("prune")
@click.argument(
    "target",
    metavar="[PROJECT|PROJECT/BRANCH]",
    required=False,
    shell_complete=complete_existing_targets,
)
@click.option("-n", "--dry-run", is_flag=True, help="Show what would be deleted without deleting.")
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Prune worktrees with uncommitted changes and skip the --all prompt.",
)
@click.option("--delete-branches", is_flag=True, help="Also delete the merged branches.")
@click.option("-a", "--all", "all_projects", is_flag=True, help="Prune across all projects.")
@click.pass_obj
@cli_error_boundary
def prune_cmd(
    ctx: TwiggitContext,
    target: str | None,
    dry_run: bool,
    force: bool,
    delete_branches: bool,
    all_projects: bool,
) -> None:
    """Delete worktrees whose branches are merged into the default branch.

    Protected branches, the worktree you are in, detached worktrees,
    unmerged branches and worktrees with uncommitted changes are skipped.
    --force prunes the dirty ones too. With --all, asks for confirmation
    unless --force is given.

    Given PROJECT/BRANCH, only that worktree is considered; once it is
    deleted the project's main checkout path is printed to stdout.

    Examples:
      twiggit prune --dry-run
      twiggit prune acme/feature-x
      twiggit prune --all --delete-branches
    """
    project: str | None = None
    branch: str | None = None
    if target:
        check_target_syntax(target)
        project, _, rest = target.partition("/")
        branch = rest or None

    context = ctx.detect_context()
    report = ctx.manager.prune(
        PruneScope(project=project, all_projects=all_projects, branch=branch),
        PruneOptions(dry_run=dry_run, force=force, delete_branches=delete_branches),
        context,
        ctx.confirmation,
    )

    if report.cancelled:
        user_output("Prune cancelled.")
        return

    if not report.outcomes:
        user_output("No merged worktrees to prune.")
        return

    _print_report(report, dry_run)

    if report.has_failures:
        raise SystemExit(1)

    if report.navigation_path is not None:
        machine_output(str(report.navigation_path))
