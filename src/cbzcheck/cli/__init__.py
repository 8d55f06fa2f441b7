# ABOUTME: CLI package for cbzcheck, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from cbzcheck.cli.commands import check_cmd, parse_cmd


@click.group()
@click.version_option(package_name="cbzcheck")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging on stderr.")
def cli(verbose: bool) -> None:
    """cbzcheck - check CBZ archives against their name and bedetheque.com."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


cli.add_command(check_cmd.check)
cli.add_command(parse_cmd.parse)
