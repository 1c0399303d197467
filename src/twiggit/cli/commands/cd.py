"""Navigation commands - print the directory a shell wrapper should cd into."""

import click

from twiggit.cli.completions import complete_existing_targets
from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.cli.output import machine_output
from twiggit.core.context import TwiggitContext


def _navigate(ctx: TwiggitContext, target: str) -> None:
    context = ctx.detect_context()
    plan = ctx.navigator.plan(context, target)
    machine_output(str(plan.path))


@click.command("cd")
@click.argument(
    "target",
    metavar="[PROJECT|PROJECT/BRANCH|BRANCH]",
    default="",
    shell_complete=complete_existing_targets,
)
@click.pass_obj
@cli_error_boundary
def cd_cmd(ctx: TwiggitContext, target: str) -> None:
    """Print the absolute path of a project or worktree.

    Prints exactly one line to stdout so a shell function can do:

      cd "$(twiggit cd acme/feature-x)"

    The default branch name always means the project's main checkout.
    """
    _navigate(ctx, target)


@click.command("switch")
@click.argument(
    "target",
    metavar="[PROJECT|PROJECT/BRANCH|BRANCH]",
    default="",
    shell_complete=complete_existing_targets,
)
@click.pass_obj
@cli_error_boundary
def switch_cmd(ctx: TwiggitContext, target: str) -> None:
    """Alias for 'cd'."""
    _navigate(ctx, target)
