"""CLI entry point for prharvest.

Commands:
  extract  write the review comments of a pull request to a CSV file
  preview  print the same data as a table
  init     interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prharvest_cli.commands.extract import extract_cmd
from prharvest_cli.commands.init import init_cmd
from prharvest_cli.commands.preview import preview_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prharvest"),
    prog_name="prharvest",
)
@click.option(
    "--config",
    "config_path",
    default=".prharvest.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRHARVEST_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every request and extraction step.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Extract pull request review comments from GitHub, GitLab or GitBucket."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(extract_cmd)
main.add_command(preview_cmd)
main.add_command(init_cmd)
