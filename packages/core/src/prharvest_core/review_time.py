"""Detection and parsing of review-session marker comments.

A marker comment records when one review iteration took place:

    - レビュー1回目
    - 日付：2023/4/14
    - 開始時刻：9:00
    - 終了時刻：11:30
    - レビュー時間：30

Labels are optional; each field is picked out of its line by shape only.
"""

from __future__ import annotations

import re

from prharvest_core.models import ReviewSession

_MARKER_RE = re.compile(r"^(?:- )?レビュー(\d+)回目")
_DATE_RE = re.compile(r"\d{4}/\d{1,2}/\d{1,2}")
_TIME_RE = re.compile(r"\d{1,2}:\d{1,2}")
_MINUTES_RE = re.compile(r"\d+")
_LINE_BREAK_RE = re.compile(r"\r\n?|\n")


def is_session_marker(body: str) -> bool:
    """Return True if the body starts with a marker for any review iteration."""
    return _MARKER_RE.match(body) is not None


def is_current_iteration(body: str, target_iteration: str) -> bool:
    """Return True if the body is a marker for ``target_iteration``.

    The iteration number is compared as text, so "01" and "1" differ.
    """
    match = _MARKER_RE.match(body)
    return match is not None and match.group(1) == target_iteration


def _find(pattern: re.Pattern, lines: list[str], index: int) -> str:
    if index >= len(lines):
        return ""
    match = pattern.search(lines[index])
    return match.group(0) if match else ""


def parse_review_session(body: str, target_iteration: str) -> ReviewSession:
    """Parse date, start, end and duration out of a current-iteration marker.

    Returns an empty ReviewSession when the body is not a marker for
    ``target_iteration``. Missing lines and lines that do not contain the
    expected shape leave the matching field empty.
    """
    if not is_current_iteration(body, target_iteration):
        return ReviewSession()

    # End lines may carry a date too: "終了時刻：2023/4/14 11:30".
    lines = [line for line in _LINE_BREAK_RE.split(body) if line.strip()]
    return ReviewSession(
        review_date=_find(_DATE_RE, lines, 1),
        start_time=_find(_TIME_RE, lines, 2),
        end_time=_find(_TIME_RE, lines, 3),
        duration_minutes=_find(_MINUTES_RE, lines, 4),
    )
