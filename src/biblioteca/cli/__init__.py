# ABOUTME: CLI package for Biblioteca, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from biblioteca.cli.commands import consume_cmd, ls_cmd, scan_cmd, suggest_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(package_name="biblioteca")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log every file processed.")
def cli(verbose: bool) -> None:
    """Biblioteca - keep an ebook catalog in sync with your library folder."""
    _configure_logging(verbose)


cli.add_command(scan_cmd.scan)
cli.add_command(consume_cmd.consume)
cli.add_command(ls_cmd.ls)
cli.add_command(suggest_cmd.suggest)
