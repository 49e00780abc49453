"""Classification of comment bodies.

Every body falls into exactly one kind:

  SESSION_MARKER  a review-iteration marker (for any iteration)
  CONTRIBUTING    review text that ends up in a record
  IGNORED         empty or backend-generated, never produces a record

Only a marker for the targeted iteration carries a parsed session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from prharvest_core.models import ReviewSession
from prharvest_core.review_time import is_current_iteration, is_session_marker, parse_review_session


class CommentKind(Enum):
    SESSION_MARKER = "session_marker"
    CONTRIBUTING = "contributing"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Classification:
    kind: CommentKind
    session: ReviewSession | None = None  # set only for the targeted iteration


def classify(body: str, target_iteration: str, synthetic: bool = False) -> Classification:
    if synthetic or not body.strip():
        return Classification(CommentKind.IGNORED)
    if is_session_marker(body):
        session = parse_review_session(body, target_iteration) if is_current_iteration(body, target_iteration) else None
        return Classification(CommentKind.SESSION_MARKER, session)
    return Classification(CommentKind.CONTRIBUTING)
