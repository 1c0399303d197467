"""Init command - write a default configuration file."""

import click

from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.cli.output import user_output
from twiggit.core.context import TwiggitContext


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_obj
@cli_error_boundary
def init_cmd(ctx: TwiggitContext, force: bool) -> None:
    """Write the configuration file with the effective settings.

    Values already coming from the environment are written out as well, so
    the file reflects what twiggit is using right now.
    """
    config_path = ctx.config_store.path()
    if ctx.config_store.exists() and not force:
        user_output(click.style("Error: ", fg="red") + f"Config already exists at {config_path}")
        user_output("Use --force to overwrite it.")
        raise SystemExit(1)

    ctx.config_store.save(ctx.config)
    user_output(click.style("✓ ", fg="green") + f"Wrote config to {config_path}")
    user_output(f"  projects_dir  = {ctx.config.projects_dir}")
    user_output(f"  worktrees_dir = {ctx.config.worktrees_dir}")
