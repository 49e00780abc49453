"""Base backend implementing the Template Method pattern.

All backends share the same extraction algorithm:
    extract() → fetch_pull_request()
              → fetch_flat_comments()
              → fetch_threads()          ← protocol details live only here
              → RecordMerger.merge()

Subclasses implement the three fetch methods and declare whether their
threads can report a resolved state. Everything after fetching, from
classification to ordering, is defined once here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from prharvest_core.merger import RecordMerger
from prharvest_core.models import FlatComment, PullRequestInfo, ReviewReport, Thread

logger = logging.getLogger(__name__)


class BaseBackend(ABC):
    NAME: str = ""
    HAS_RESOLVED_STATUS: bool = False

    def __init__(self, config: dict):
        self.config = config
        self.page_size: int = config["page_size"]

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def extract(self) -> ReviewReport:
        """Fetch everything for the configured pull request and merge it.

        Any fetch failure propagates; a report is only returned when every
        page was retrieved.
        """
        info = self.fetch_pull_request()
        logger.info("%s: fetched pull request by %s", self.NAME, info.author or "(unknown)")
        flat_comments = self.fetch_flat_comments()
        threads = self.fetch_threads()
        logger.info("%s: %d flat comment(s), %d thread(s)", self.NAME, len(flat_comments), len(threads))

        merger = RecordMerger(
            target_iteration=self.config["review_times"],
            delimiter=self.config.get("delimiter") or "",
            postscript_prefix=self.config.get("postscript_prefix") or "",
            has_resolved_status=self.HAS_RESOLVED_STATUS,
        )
        records, session = merger.merge(info, flat_comments, threads)
        return ReviewReport(info=info, session=session, records=records)

    def close(self) -> None:
        """Release any resources held by the backend (sessions, connections).

        Default is a no-op so callers can always call close() safely.
        """

    # ------------------------------------------------------------------ #
    # Abstract: implement in each backend                                 #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def fetch_pull_request(self) -> PullRequestInfo:
        """Return the document author, page URL and diff line counts."""

    @abstractmethod
    def fetch_flat_comments(self) -> list[FlatComment]:
        """Return top-level comments in fetch order. Empty for backends without them."""

    @abstractmethod
    def fetch_threads(self) -> list[Thread]:
        """Return fully reconstructed threads in fetch order."""
