"""GitLab backend built on the REST v4 API.

Every merge request comment lives in a discussion, so GitLab has no flat
comments and never needs the delimiter. Discussions are paged by page
number; the next page number comes from the ``X-Next-Page`` header and
serves as the outer cursor. A discussion always arrives with all of its
notes.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from prharvest_core.backends.base import BaseBackend
from prharvest_core.backends.http import build_session, check_status, read_json, send
from prharvest_core.errors import DataShapeError
from prharvest_core.models import FlatComment, Note, Page, PullRequestInfo, RawThread, Thread, ThreadCursor
from prharvest_core.threads import ThreadReconstructor

logger = logging.getLogger(__name__)

_NOT_FOUND_MESSAGE = "Merge request not found. Check the project ID and merge request ID."


def _next_page(resp) -> str | None:
    return resp.headers.get("X-Next-Page") or None


class GitLabBackend(BaseBackend):
    NAME = "GitLab"
    HAS_RESOLVED_STATUS = True

    def __init__(self, config: dict, session=None):
        super().__init__(config)
        self._session = session or build_session(config.get("proxy"))
        self._session.headers["PRIVATE-TOKEN"] = config["access_token"]
        self._base_url = (
            f"{config['endpoint']}/projects/{quote(str(config['repo']), safe='')}"
            f"/merge_requests/{quote(str(config['pull']), safe='')}"
        )
        self._web_url = ""

    def close(self) -> None:
        self._session.close()

    def _get(self, path: str = "", params: dict | None = None):
        resp = send(self._session, "GET", self._base_url + path, params=params)
        check_status(resp, _NOT_FOUND_MESSAGE)
        return resp

    def fetch_pull_request(self) -> PullRequestInfo:
        data = read_json(self._get())
        if not isinstance(data, dict):
            raise DataShapeError("Unexpected merge request payload from GitLab.")
        self._web_url = data.get("web_url") or ""

        additions = deletions = 0
        if self.config.get("use_diff_count", True):
            additions, deletions = self._count_changes()
        return PullRequestInfo(
            author=(data.get("author") or {}).get("username", ""),
            url=self._web_url,
            additions=additions,
            deletions=deletions,
        )

    def _count_changes(self) -> tuple[int, int]:
        """Count added and removed lines across every changed file's diff."""
        additions = deletions = 0
        page: str | None = "1"
        while page:
            resp = self._get("/changes", params={"per_page": self.page_size, "page": page})
            data = read_json(resp)
            if not isinstance(data, dict):
                raise DataShapeError("Unexpected changes payload from GitLab.")
            for change in data.get("changes") or []:
                diff = change.get("diff") or ""
                additions += diff.count("\n+")
                deletions += diff.count("\n-")
            page = _next_page(resp)
        return additions, deletions

    def fetch_flat_comments(self) -> list[FlatComment]:
        return []

    def fetch_threads(self) -> list[Thread]:
        return list(ThreadReconstructor(self, self.page_size).iter_threads())

    def fetch_thread_page(self, position: ThreadCursor, limit: int) -> Page[RawThread]:
        resp = self._get("/discussions", params={"per_page": limit, "page": position.previous_outer or "1"})
        discussions = read_json(resp)
        if not isinstance(discussions, list):
            raise DataShapeError("Unexpected discussions payload from GitLab.")

        items = []
        for discussion in discussions:
            raw_notes = discussion.get("notes") or []
            if not raw_notes:
                continue
            notes = [
                Note(
                    author=(n.get("author") or {}).get("username", ""),
                    body=n.get("body") or "",
                    timestamp=n.get("created_at") or "",
                    system=bool(n.get("system")),
                )
                for n in raw_notes
            ]
            items.append(
                RawThread(
                    thread_id=str(discussion.get("id", "")),
                    notes=Page(items=notes),
                    url=f"{self._web_url}#note_{raw_notes[0].get('id', '')}",
                    resolved=bool(raw_notes[-1].get("resolved")),
                )
            )
        next_page = _next_page(resp)
        return Page(items=items, next_cursor=next_page, has_more=next_page is not None)
