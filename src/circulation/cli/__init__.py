# ABOUTME: CLI package for the circulation desk, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import click

from circulation.cli.commands import shell_cmd
from circulation.cli.logs import setup_logging


@click.group()
@click.version_option(package_name="circulation-desk")
@click.option("-v", "--verbose", count=True, help="Log INFO events; repeat for DEBUG.")
def cli(verbose: int) -> None:
    """Circulation desk - an in-memory library checkout manager."""
    setup_logging(verbose)


cli.add_command(shell_cmd.shell)
