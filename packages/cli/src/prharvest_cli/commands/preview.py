"""preview command: print the extracted review comments without writing a file."""

from __future__ import annotations

import click
from rich.console import Console

from prharvest_cli.bridge import load_run_config, report_error, report_to_export
from prharvest_cli.commands.options import extraction_options
from prharvest_core.errors import ExtractionError
from prharvest_core.extractor import run_extraction
from prharvest_export.console import ConsoleExporter

console = Console()


@click.command("preview")
@extraction_options
@click.pass_context
def preview_cmd(ctx, **overrides):
    """Show the review comments of a pull request as a table.

    Takes the same options as `prharvest extract` except the CSV ones.
    """
    config = {key: value for key, value in overrides.items() if value is not None}
    try:
        config = load_run_config(ctx.obj["config_path"], overrides)
        report = run_extraction(config, require_csv=False)
    except ExtractionError as e:
        report_error(ctx, str(e), config.get("use_sjis_stderr", True))
        return

    title = f"Review comments: {report.info.url}" if report.info.url else "Review comments"
    ConsoleExporter(console=console, title=title).write(report_to_export(report))
