"""Combine flat comments and threads into one ordered record list."""

from __future__ import annotations

import logging

from prharvest_core.classify import CommentKind, classify
from prharvest_core.models import FlatComment, PullRequestInfo, ReviewRecord, ReviewSession, Thread
from prharvest_core.text import split_comment
from prharvest_core.threads import attribute

logger = logging.getLogger(__name__)


class RecordMerger:
    """Turn normalized comments into ReviewRecords and a ReviewSession.

    Only the first marker for the targeted iteration (in fetch order, flat
    comments before threads) fills the session; markers for other
    iterations are dropped.
    """

    def __init__(
        self,
        target_iteration: str,
        delimiter: str,
        postscript_prefix: str,
        has_resolved_status: bool,
    ):
        self.target_iteration = target_iteration
        self.delimiter = delimiter
        self.postscript_prefix = postscript_prefix
        self.has_resolved_status = has_resolved_status

    def merge(
        self,
        info: PullRequestInfo,
        flat_comments: list[FlatComment],
        threads: list[Thread],
    ) -> tuple[list[ReviewRecord], ReviewSession]:
        session: ReviewSession | None = None
        flat_records: list[ReviewRecord] = []
        thread_records: list[ReviewRecord] = []

        for comment in flat_comments:
            result = classify(comment.body, self.target_iteration)
            if result.kind is CommentKind.SESSION_MARKER:
                if session is None and result.session is not None:
                    session = result.session
            elif result.kind is CommentKind.CONTRIBUTING:
                flat_records.append(self._flat_record(comment))

        for thread in threads:
            if not thread.notes:
                continue
            first = thread.notes[0]
            if first.system:
                continue
            result = classify(first.body, self.target_iteration)
            if result.kind is CommentKind.SESSION_MARKER:
                # Later replies in a marker thread may carry the current iteration.
                if session is None:
                    session = self._thread_session(thread)
            else:
                # An empty opening note (an image, say) still leaves the replies.
                thread_records.append(self._thread_record(thread, info.author))

        records = [r for r in flat_records + thread_records if r.reviewer_comment or r.reviewee_comment]
        dropped = len(flat_records) + len(thread_records) - len(records)
        if dropped:
            logger.debug("Dropped %d record(s) with no comment text", dropped)

        # sorted() is stable: on equal keys flat records stay ahead of threads.
        records = sorted(records, key=lambda r: r.order_key)
        return records, session or ReviewSession()

    def _flat_record(self, comment: FlatComment) -> ReviewRecord:
        reviewer_comment, reviewee_comment = split_comment(comment.body, self.delimiter)
        return ReviewRecord(
            location_ref=comment.url,
            reviewer_comment=reviewer_comment,
            reviewer_name=comment.author,
            reviewee_comment=reviewee_comment,
            reviewee_name=comment.reviewee,
            resolved=False,
            has_resolved_status=False,
            order_key=comment.timestamp,
        )

    def _thread_record(self, thread: Thread, document_author: str) -> ReviewRecord:
        attribution = attribute(thread.notes, document_author, self.postscript_prefix)
        return ReviewRecord(
            location_ref=thread.url,
            reviewer_comment=attribution.reviewer_comment,
            reviewer_name=attribution.reviewer,
            reviewee_comment=attribution.reviewee_comment,
            reviewee_name=document_author,
            resolved=thread.resolved if self.has_resolved_status else False,
            has_resolved_status=self.has_resolved_status,
            order_key=thread.timestamp,
        )

    def _thread_session(self, thread: Thread) -> ReviewSession | None:
        for note in thread.notes:
            result = classify(note.body, self.target_iteration, synthetic=note.system)
            if result.session is not None:
                return result.session
        return None
