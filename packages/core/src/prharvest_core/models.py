"""Normalized review data shared by every backend.

Backends translate their raw payloads into these shapes; everything
downstream of a backend (classification, thread reconstruction, merging,
export mapping) only ever sees these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class ReviewSession:
    """Date and timing of one review iteration, parsed from a marker comment."""

    review_date: str = ""
    start_time: str = ""
    end_time: str = ""
    duration_minutes: str = ""

    def is_empty(self) -> bool:
        return not (self.review_date or self.start_time or self.end_time or self.duration_minutes)


@dataclass
class ReviewRecord:
    """One row of review output: an objection and the answer to it.

    ``has_resolved_status`` is False when the backend has no notion of a
    resolved thread; ``resolved`` is then always False.
    """

    location_ref: str
    reviewer_comment: str
    reviewer_name: str
    reviewee_comment: str
    reviewee_name: str
    resolved: bool = False
    has_resolved_status: bool = False
    order_key: str = ""


@dataclass
class Note:
    author: str
    body: str
    timestamp: str = ""
    system: bool = False  # generated by the backend, never a human comment


@dataclass
class FlatComment:
    """A top-level, non-threaded comment.

    ``reviewee`` is left empty by backends that cannot tell who a flat
    comment is addressed to.
    """

    url: str
    author: str
    body: str
    timestamp: str = ""
    reviewee: str = ""


@dataclass
class Page(Generic[T]):
    """One page of any cursor- or number-paginated collection."""

    items: list[T] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


@dataclass(frozen=True)
class ThreadCursor:
    """Position for a thread fetch.

    ``previous_outer`` is the outer (thread-level) cursor the fetch starts
    after; ``inner`` is the note-level cursor inside the thread that follows
    it. Both are None for the very first page.
    """

    previous_outer: str | None = None
    inner: str | None = None


@dataclass
class RawThread:
    """A thread exactly as one page fetch returned it, notes possibly incomplete."""

    thread_id: str
    notes: Page[Note]
    url: str = ""
    resolved: bool = False
    cursor: str | None = None  # this thread's own outer cursor


@dataclass
class Thread:
    thread_id: str
    notes: list[Note]
    url: str = ""
    resolved: bool = False
    timestamp: str = ""


@dataclass
class PullRequestInfo:
    author: str
    url: str
    additions: int = 0
    deletions: int = 0


@dataclass
class ReviewReport:
    """Result of one extraction run.

    Decoupled from prharvest_export: the CLI maps header() and rows() onto
    export models, so the core has no knowledge of output formats.
    """

    info: PullRequestInfo
    session: ReviewSession = field(default_factory=ReviewSession)
    records: list[ReviewRecord] = field(default_factory=list)

    def header(self) -> tuple[int, int, str, str, str, str]:
        return (
            self.info.additions,
            self.info.deletions,
            self.session.review_date,
            self.session.start_time,
            self.session.end_time,
            self.session.duration_minutes,
        )

    def rows(self) -> list[tuple[str, str, str, str, str, bool, bool]]:
        return [
            (
                r.location_ref,
                r.reviewer_comment,
                r.reviewer_name,
                r.reviewee_comment,
                r.reviewee_name,
                r.resolved,
                r.has_resolved_status,
            )
            for r in self.records
        ]
