"""Console exporter: prints the extracted data as rich tables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from prharvest_export.base import BaseExporter

if TYPE_CHECKING:
    from prharvest_export.models import ExportData

_MAX_COMMENT_WIDTH = 60


def _resolved_cell(resolved: bool, has_resolved_status: bool) -> str:
    if not has_resolved_status:
        return "[dim]n/a[/dim]"
    return "[green]resolved[/green]" if resolved else "[yellow]open[/yellow]"


class ConsoleExporter(BaseExporter):
    def __init__(self, console: Console | None = None, title: str = "Review comments"):
        self.console = console or Console()
        self.title = title

    def write(self, data: ExportData) -> None:
        h = data.header
        summary = Table(show_header=True, header_style="bold cyan")
        for column in ("Additions", "Deletions", "Date", "Start", "End", "Minutes"):
            summary.add_column(column)
        summary.add_row(*h.as_fields())
        self.console.print(summary)

        if not data.rows:
            self.console.print("[yellow]No review comments found.[/yellow]")
            return

        table = Table(title=self.title, show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right", width=4)
        table.add_column("Reviewer", style="bold")
        table.add_column("Comment", max_width=_MAX_COMMENT_WIDTH)
        table.add_column("Reviewee", style="bold")
        table.add_column("Response", max_width=_MAX_COMMENT_WIDTH)
        table.add_column("Status")
        table.add_column("URL", overflow="fold")

        for i, row in enumerate(data.rows, start=1):
            table.add_row(
                str(i),
                # Comment text is shown literally, never as markup.
                Text(row.reviewer),
                Text(row.reviewer_comment),
                Text(row.reviewee),
                Text(row.reviewee_comment),
                _resolved_cell(row.resolved, row.has_resolved_status),
                Text(row.url),
            )
        self.console.print(table)
