"""Export data models.

Decoupled from prharvest_core so exporters can be used independently and
the core has no knowledge of output formats. The CLI maps a ReviewReport
to ExportData before handing it to an exporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class HeaderRow:
    """First output row: diff size and the review session timing."""

    additions: int = 0
    deletions: int = 0
    review_date: str = ""
    start_time: str = ""
    end_time: str = ""
    duration_minutes: str = ""

    def as_fields(self) -> list[str]:
        return [
            str(self.additions),
            str(self.deletions),
            self.review_date,
            self.start_time,
            self.end_time,
            self.duration_minutes,
        ]


@dataclass
class CommentRow:
    """One review finding with the reviewee's response.

    Comment fields may contain raw newlines; exporters decide how to
    render them.
    """

    url: str
    reviewer_comment: str
    reviewer: str
    reviewee_comment: str
    reviewee: str
    resolved: bool = False
    has_resolved_status: bool = False  # False when the backend cannot report resolution


@dataclass
class ExportData:
    header: HeaderRow = field(default_factory=HeaderRow)
    rows: list[CommentRow] = field(default_factory=list)
