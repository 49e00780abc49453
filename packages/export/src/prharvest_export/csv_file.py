"""CSV file exporter.

Layout: one header row (additions, deletions, date, start, end, minutes)
followed by one row per review record. Rows end with CRLF. Line breaks in
comment text are escaped so every record stays on one physical line, and
the file is encoded as Shift_JIS (cp932) or UTF-8.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import TYPE_CHECKING

from prharvest_export.base import BaseExporter
from prharvest_export.errors import ExportError

if TYPE_CHECKING:
    from prharvest_export.models import ExportData

logger = logging.getLogger(__name__)

SJIS_ENCODING = "cp932"

SJIS_UNSUPPORTED_MESSAGE = (
    "The output contains characters that cannot be written in Shift_JIS, such as emoji. "
    "Set use_sjis_file: false to write UTF-8 instead."
)


def escape(text: str) -> str:
    """Fold ``text`` onto one line: ``\\`` becomes ``\\\\``, LF becomes ``\\n``, CR is dropped."""
    return text.replace("\\", "\\\\").replace("\r", "").replace("\n", "\\n")


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def render(data: ExportData) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow(data.header.as_fields())
    for row in data.rows:
        writer.writerow(
            [
                row.url,
                escape(row.reviewer_comment),
                row.reviewer,
                escape(row.reviewee_comment),
                row.reviewee,
                _format_bool(row.resolved),
                _format_bool(row.has_resolved_status),
            ]
        )
    return buf.getvalue()


class CsvExporter(BaseExporter):
    """Writes the whole CSV in one go once it has been rendered and encoded.

    Nothing touches the file if encoding fails, so an unencodable comment
    never leaves a truncated CSV behind.
    """

    def __init__(self, path: str, use_sjis: bool = True):
        self.path = path
        self.encoding = SJIS_ENCODING if use_sjis else "utf-8"

    def write(self, data: ExportData) -> None:
        try:
            payload = render(data).encode(self.encoding)
        except UnicodeEncodeError as e:
            raise ExportError(SJIS_UNSUPPORTED_MESSAGE) from e

        try:
            with open(self.path, "wb") as f:
                f.write(payload)
        except OSError as e:
            raise ExportError(f"Could not write {self.path}: {e.strerror or e}") from e
        logger.info("Wrote %d row(s) to %s (%s)", len(data.rows), self.path, self.encoding)
