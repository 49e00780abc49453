"""Glue between prharvest_core and prharvest_export.

The CLI layer owns this mapping: prharvest_core has no export knowledge and
prharvest_export has no core knowledge. The CLI bridges the two.
"""

from __future__ import annotations

import click

from prharvest_core.models import ReviewReport
from prharvest_export.models import CommentRow, ExportData, HeaderRow

SJIS_ENCODING = "cp932"


def report_to_export(report: ReviewReport) -> ExportData:
    additions, deletions, date, start, end, minutes = report.header()
    return ExportData(
        header=HeaderRow(
            additions=additions,
            deletions=deletions,
            review_date=date,
            start_time=start,
            end_time=end,
            duration_minutes=minutes,
        ),
        rows=[
            CommentRow(
                url=url,
                reviewer_comment=reviewer_comment,
                reviewer=reviewer,
                reviewee_comment=reviewee_comment,
                reviewee=reviewee,
                resolved=resolved,
                has_resolved_status=has_resolved_status,
            )
            for url, reviewer_comment, reviewer, reviewee_comment, reviewee, resolved, has_resolved_status in report.rows()
        ],
    )


def load_run_config(config_path: str, overrides: dict) -> dict:
    """Load the config file, apply command-line overrides and fill in the token."""
    from prharvest_core.config import load_config
    from prharvest_cli.auth import resolve_access_token

    config = load_config(config_path, cli_overrides=overrides)
    if not config.get("access_token"):
        config["access_token"] = resolve_access_token(config.get("target"))
    return config


def report_error(ctx: click.Context, message: str, use_sjis: bool) -> None:
    """Write ``message`` to stderr and exit with status 1.

    Consoles on Japanese Windows expect Shift_JIS, so the message is
    encoded as cp932 when ``use_sjis`` is set.
    """
    encoding = SJIS_ENCODING if use_sjis else "utf-8"
    stream = click.get_binary_stream("stderr")
    stream.write((message + "\n").encode(encoding, errors="replace"))
    stream.flush()
    ctx.exit(1)
