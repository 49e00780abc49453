"""extract command: fetch review comments of one pull request into a CSV file."""

from __future__ import annotations

import click
from rich.console import Console

from prharvest_cli.bridge import load_run_config, report_error, report_to_export
from prharvest_cli.commands.options import extraction_options
from prharvest_core.errors import ExtractionError
from prharvest_core.extractor import run_extraction
from prharvest_export.csv_file import CsvExporter
from prharvest_export.errors import ExportError

console = Console(stderr=True)


@click.command("extract")
@extraction_options
@click.option("--csv-file", default=None, help="Path of the CSV file to write.")
@click.option(
    "--use-sjis-file/--no-sjis-file",
    default=None,
    help="Encode the CSV in Shift_JIS instead of UTF-8.",
)
@click.pass_context
def extract_cmd(ctx, **overrides):
    """Extract review comments and response into a CSV file.

    The first row holds the diff size and the review time of the chosen
    iteration; each following row is one finding with its response.

    \b
    Token fallbacks when --access-token is not given:
      PRHARVEST_ACCESS_TOKEN   any target
      GITHUB_TOKEN / gh CLI    --target github
      GITLAB_TOKEN             --target gitlab
    """
    config = {key: value for key, value in overrides.items() if value is not None}
    try:
        config = load_run_config(ctx.obj["config_path"], overrides)
        report = run_extraction(config)
        exporter = CsvExporter(config["csv_file"], use_sjis=config.get("use_sjis_file", True))
        try:
            exporter.write(report_to_export(report))
        finally:
            exporter.close()
    except (ExtractionError, ExportError) as e:
        report_error(ctx, str(e), config.get("use_sjis_stderr", True))
        return

    console.print(f"[green]Wrote {len(report.records)} review comment(s) to {config['csv_file']}[/green]")
