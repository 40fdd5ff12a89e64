import logging
import os

import click

from branchline.cli.commands.append import append_cmd
from branchline.cli.commands.config import config_group
from branchline.cli.commands.hack import hack_cmd
from branchline.cli.commands.kill import kill_cmd
from branchline.cli.commands.prepend import prepend_cmd
from branchline.cli.commands.rename_branch import rename_branch_cmd
from branchline.cli.commands.resume import continue_cmd, skip_cmd, status_cmd, undo_cmd
from branchline.cli.commands.ship import ship_cmd
from branchline.cli.commands.sync import sync_cmd
from branchline.cli.constants import DEBUG_ENV_VAR
from branchline.cli.core import configure_logging
from branchline.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="branchline")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Keep chains of dependent feature branches in sync."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=False)


cli.add_command(append_cmd)
cli.add_command(config_group)
cli.add_command(continue_cmd)
cli.add_command(hack_cmd)
cli.add_command(kill_cmd)
cli.add_command(prepend_cmd)
cli.add_command(rename_branch_cmd)
cli.add_command(ship_cmd)
cli.add_command(skip_cmd)
cli.add_command(status_cmd)
cli.add_command(sync_cmd)
cli.add_command(undo_cmd)


def main() -> None:
    """CLI entry point used by the `branchline` console script."""
    if os.environ.get(DEBUG_ENV_VAR):
        configure_logging(verbose=True)
    else:
        logging.basicConfig(level=logging.WARNING)
    cli()
