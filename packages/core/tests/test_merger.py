"""Tests for RecordMerger."""

from prharvest_core.merger import RecordMerger
from prharvest_core.models import FlatComment, Note, PullRequestInfo, Thread

INFO = PullRequestInfo(author="author", url="https://example.com/pr/1", additions=10, deletions=2)
MARKER = "レビュー1回目\n2023/4/14\n9:00\n11:30\n30"


def _merger(has_resolved_status=True):
    return RecordMerger(target_iteration="1", delimiter="~~", postscript_prefix="(追記)", has_resolved_status=has_resolved_status)


def _thread(tid, ts, *notes, resolved=False):
    return Thread(thread_id=tid, notes=list(notes), url=f"u-{tid}", resolved=resolved, timestamp=ts)


class TestOrdering:
    def test_sorted_by_timestamp_across_sources(self):
        flat = [
            FlatComment(url="f1", author="rev", body="first", timestamp="2023-01-01T00:00:01Z"),
            FlatComment(url="f3", author="rev", body="third", timestamp="2023-01-01T00:00:03Z"),
        ]
        threads = [_thread("t2", "2023-01-01T00:00:02Z", Note("rev", "second"))]

        records, _ = _merger().merge(INFO, flat, threads)

        assert [r.location_ref for r in records] == ["f1", "u-t2", "f3"]

    def test_equal_timestamps_keep_flat_before_thread(self):
        flat = [FlatComment(url="f", author="rev", body="flat", timestamp="T")]
        threads = [_thread("t", "T", Note("rev", "thread"))]
        records, _ = _merger().merge(INFO, flat, threads)
        assert [r.location_ref for r in records] == ["f", "u-t"]


class TestRecords:
    def test_flat_comment_split_on_delimiter(self):
        flat = [FlatComment(url="f", author="rev", body="Rename.\n~~\nDone.", timestamp="1")]
        (record,), _ = _merger().merge(INFO, flat, [])
        assert record.reviewer_comment == "Rename."
        assert record.reviewee_comment == "Done."
        assert record.reviewer_name == "rev"
        assert record.reviewee_name == ""
        assert record.has_resolved_status is False
        assert record.resolved is False

    def test_flat_comment_reviewee_carried(self):
        flat = [FlatComment(url="f", author="rev", body="x", reviewee="author")]
        (record,), _ = _merger(has_resolved_status=False).merge(INFO, flat, [])
        assert record.reviewee_name == "author"

    def test_thread_record(self):
        threads = [_thread("t", "1", Note("rev", "Fix."), Note("author", "Fixed."), resolved=True)]
        (record,), _ = _merger().merge(INFO, [], threads)
        assert record.reviewer_name == "rev"
        assert record.reviewee_name == "author"
        assert record.reviewer_comment == "Fix."
        assert record.reviewee_comment == "Fixed."
        assert record.resolved is True
        assert record.has_resolved_status is True

    def test_resolution_hidden_without_capability(self):
        threads = [_thread("t", "1", Note("rev", "Fix."), resolved=True)]
        (record,), _ = _merger(has_resolved_status=False).merge(INFO, [], threads)
        assert record.resolved is False
        assert record.has_resolved_status is False

    def test_empty_halves_never_emitted(self):
        flat = [
            FlatComment(url="f1", author="rev", body="~~"),
            FlatComment(url="f2", author="rev", body="  "),
        ]
        threads = [_thread("t", "1", Note("rev", "\n~~\n"))]
        records, _ = _merger().merge(INFO, flat, threads)
        # The thread keeps its raw text; only the flat "~~" and blank bodies vanish.
        assert [r.location_ref for r in records] == ["u-t"]

    def test_system_thread_ignored(self):
        threads = [_thread("t", "1", Note("bot", "added 2 commits", system=True), Note("rev", "reply"))]
        records, _ = _merger().merge(INFO, [], threads)
        assert records == []

    def test_thread_with_empty_first_note_keeps_replies(self):
        threads = [_thread("t", "1", Note("rev", ""), Note("rev", "text"), Note("author", "Fixed."))]
        (record,), _ = _merger().merge(INFO, [], threads)
        assert record.reviewer_name == "rev"
        assert record.reviewer_comment == "text"
        assert record.reviewee_comment == "Fixed."

    def test_thread_with_no_text_at_all_is_dropped(self):
        threads = [_thread("t", "1", Note("author", ""), Note("bot", "x", system=True))]
        records, _ = _merger().merge(INFO, [], threads)
        assert records == []


class TestSession:
    def test_marker_in_flat_comment_sets_session_and_is_not_a_record(self):
        flat = [FlatComment(url="m", author="rev", body=MARKER), FlatComment(url="f", author="rev", body="x")]
        records, session = _merger().merge(INFO, flat, [])
        assert session.review_date == "2023/4/14"
        assert session.duration_minutes == "30"
        assert [r.location_ref for r in records] == ["f"]

    def test_other_iteration_marker_dropped(self):
        flat = [FlatComment(url="m", author="rev", body=MARKER.replace("1回目", "2回目"))]
        records, session = _merger().merge(INFO, flat, [])
        assert records == []
        assert session.is_empty()

    def test_first_matching_marker_wins(self):
        second = "レビュー1回目\n2024/1/1\n1:00\n2:00\n60"
        flat = [FlatComment(url="a", author="r", body=MARKER), FlatComment(url="b", author="r", body=second)]
        _, session = _merger().merge(INFO, flat, [])
        assert session.review_date == "2023/4/14"

    def test_marker_thread_reply_carries_current_iteration(self):
        threads = [
            _thread(
                "t",
                "1",
                Note("rev", "レビュー2回目\n2023/4/1\n9:00\n10:00\n60"),
                Note("rev", MARKER),
            )
        ]
        records, session = _merger().merge(INFO, [], threads)
        assert records == []
        assert session.start_time == "9:00"
        assert session.end_time == "11:30"

    def test_no_marker_gives_empty_session(self):
        _, session = _merger().merge(INFO, [], [])
        assert session.is_empty()
