import logging
import os

import click

from twiggit.cli.commands.cd import cd_cmd, switch_cmd
from twiggit.cli.commands.create import create_cmd
from twiggit.cli.commands.delete import delete_cmd
from twiggit.cli.commands.init import init_cmd
from twiggit.cli.commands.list_cmd import list_cmd
from twiggit.cli.commands.prune import prune_cmd
from twiggit.cli.error_boundary import cli_error_boundary
from twiggit.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "TWIGGIT_DEBUG"


def configure_logging(verbose: bool) -> None:
    """Enable debug logging on stderr for --verbose or TWIGGIT_DEBUG=1."""
    if verbose or os.getenv(DEBUG_ENV_VAR):
        logging.basicConfig(
            level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s"
        )


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="twiggit")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging on stderr.")
@click.pass_context
@cli_error_boundary
def cli(ctx: click.Context, verbose: bool) -> None:
    """Manage git worktrees across a directory of projects."""
    configure_logging(verbose)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(create_cmd)
cli.add_command(delete_cmd)
cli.add_command(list_cmd)
cli.add_command(cd_cmd)
cli.add_command(switch_cmd)
cli.add_command(prune_cmd)
cli.add_command(init_cmd)


def main() -> None:
    """CLI entry point used by the `twiggit` console script."""
    cli()
