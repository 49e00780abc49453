from __future__ import annotations

import re

_LINE_BREAK_RE = re.compile(r"\r\n?")


def normalize_newlines(body: str) -> str:
    return _LINE_BREAK_RE.sub("\n", body)


def split_comment(body: str, delimiter: str) -> tuple[str, str]:
    """Split a comment into its reviewer half and reviewee half.

    The delimiter only counts when it sits on a line of its own. Only the
    first such line splits; later ones stay in the reviewee half. Without a
    delimiter line the whole comment belongs to the reviewer.
    """
    wrapped = "\n" + normalize_newlines(body) + "\n"
    reviewer, _, reviewee = wrapped.partition("\n" + delimiter + "\n")
    return reviewer.strip(), reviewee.strip()
