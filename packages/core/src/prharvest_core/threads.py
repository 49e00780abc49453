"""Thread reconstruction across two-level pagination.

Backends page threads with an outer cursor and, inside each thread, page
its notes with an inner cursor. A thread-scoped follow-up request can only
say "the thread after outer position X, notes after inner position Y", so
completing a thread needs the outer cursor of the thread *before* it (or
the page's starting cursor for the first thread on a page). That pair
travels as one ThreadCursor value.

Reconstruction:
    iter_threads() → fetch_thread_page(ThreadCursor(outer, None), page_size)
                   → reconstruct(raw, previous_outer)  (per thread)
                   → fetch_thread_page(ThreadCursor(previous_outer, inner), 1)
                     until the thread's notes are exhausted
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from prharvest_core.errors import DataShapeError
from prharvest_core.models import Note, Page, RawThread, Thread, ThreadCursor

logger = logging.getLogger(__name__)


class ThreadSource(Protocol):
    def fetch_thread_page(self, position: ThreadCursor, limit: int) -> Page[RawThread]:
        """Return up to ``limit`` threads after ``position.previous_outer``.

        The notes of the first returned thread start after ``position.inner``.
        """


class ThreadReconstructor:
    def __init__(self, source: ThreadSource, page_size: int):
        self._source = source
        self._page_size = page_size

    def iter_threads(self) -> Iterator[Thread]:
        """Yield every thread with all of its notes, in fetch order."""
        outer: str | None = None
        while True:
            page = self._source.fetch_thread_page(ThreadCursor(outer, None), self._page_size)
            logger.debug("Fetched %d thread(s) after outer cursor %r", len(page.items), outer)
            for i, raw in enumerate(page.items):
                previous_outer = outer if i == 0 else page.items[i - 1].cursor
                yield self.reconstruct(raw, previous_outer)
            if not page.has_more:
                return
            outer = page.next_cursor

    def reconstruct(self, raw: RawThread, previous_outer: str | None) -> Thread:
        """Complete ``raw`` by following its note cursor until exhausted."""
        notes = list(raw.notes.items)
        current = raw.notes
        while current.has_more:
            position = ThreadCursor(previous_outer, current.next_cursor)
            page = self._source.fetch_thread_page(position, 1)
            match = next((t for t in page.items if t.thread_id == raw.thread_id), None)
            if match is None:
                raise DataShapeError(
                    f"Could not find review thread {raw.thread_id} while fetching its remaining comments."
                )
            logger.debug("Continued thread %s with %d note(s)", raw.thread_id, len(match.notes.items))
            notes.extend(match.notes.items)
            current = match.notes

        return Thread(
            thread_id=raw.thread_id,
            notes=notes,
            url=raw.url,
            resolved=raw.resolved,
            timestamp=notes[0].timestamp if notes else "",
        )


@dataclass
class Attribution:
    reviewer: str
    reviewer_comment: str
    reviewee_comment: str


def attribute(notes: list[Note], document_author: str, postscript_prefix: str) -> Attribution:
    """Split thread notes into reviewer and reviewee text.

    Notes by ``document_author`` are the reviewee's; all others are the
    reviewer's. The first non-author note names the reviewer for the whole
    thread, even if other participants chime in later. Each side's notes
    are joined in order, every note after the first prefixed by
    ``postscript_prefix`` on a new line.
    """
    reviewer: str | None = None
    reviewer_bodies: list[str] = []
    reviewee_bodies: list[str] = []
    for note in notes:
        if note.system or not note.body:
            continue
        if note.author == document_author:
            reviewee_bodies.append(note.body)
        else:
            reviewer_bodies.append(note.body)
            if reviewer is None:
                reviewer = note.author

    separator = "\n" + postscript_prefix
    return Attribution(
        reviewer=reviewer or "",
        reviewer_comment=separator.join(reviewer_bodies),
        reviewee_comment=separator.join(reviewee_bodies),
    )
