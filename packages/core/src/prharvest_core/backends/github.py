"""GitHub backend built on the GraphQL API through PyGithub's requester.

Two queries are used:
  - COMMENTS_QUERY pages the PR's issue comments and review bodies side by
    side (one cursor each) and carries the PR metadata.
  - THREADS_QUERY pages review threads, each with its own page of comments.
    Threads with more comments than fit one page are completed through
    ThreadReconstructor.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

import requests
from github import (
    Auth,
    BadCredentialsException,
    Github,
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)

from prharvest_core.backends.base import BaseBackend
from prharvest_core.errors import AuthError, ConfigError, DataShapeError, NotFoundError, RateLimitError, TransportError
from prharvest_core.models import FlatComment, Note, Page, PullRequestInfo, RawThread, Thread, ThreadCursor
from prharvest_core.threads import ThreadReconstructor

logger = logging.getLogger(__name__)

_PROXY_VARS = ("HTTPS_PROXY", "HTTP_PROXY", "ALL_PROXY", "https_proxy", "http_proxy", "all_proxy")
_RATE_LIMIT_MARKER = "API rate limit exceeded"
_NOT_FOUND_MESSAGE = "Pull request not found. Check the organization, repository and pull request ID."

_COMMENT_FIELDS = """
        edges {
          cursor
          node {
            url
            body
            createdAt
            author { login }
          }
        }
        pageInfo { hasNextPage endCursor }
"""

COMMENTS_QUERY = (
    """
query ($org: String!, $repo: String!, $pull: Int!, $limit: Int!, $commentsCursor: String, $reviewsCursor: String) {
  repository(owner: $org, name: $repo) {
    pullRequest(number: $pull) {
      url
      additions
      deletions
      author { login }
      comments(first: $limit, after: $commentsCursor) {"""
    + _COMMENT_FIELDS
    + """      }
      reviews(first: $limit, after: $reviewsCursor) {"""
    + _COMMENT_FIELDS
    + """      }
    }
  }
}
"""
)

THREADS_QUERY = (
    """
query ($org: String!, $repo: String!, $pull: Int!,
       $reviewThreadsLimit: Int!, $reviewThreadsCursor: String,
       $commentsLimit: Int!, $commentsCursor: String) {
  repository(owner: $org, name: $repo) {
    pullRequest(number: $pull) {
      reviewThreads(first: $reviewThreadsLimit, after: $reviewThreadsCursor) {
        edges {
          cursor
          node {
            id
            isResolved
            comments(first: $commentsLimit, after: $commentsCursor) {"""
    + _COMMENT_FIELDS
    + """            }
          }
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""
)


@contextmanager
def _proxy_environment(proxy: str | None) -> Iterator[None]:
    """Expose only ``proxy`` to requests for the duration of one call.

    PyGithub reads proxies from the environment, so the caller's proxy
    variables are hidden and restored afterwards.
    """
    saved = {name: os.environ.pop(name) for name in _PROXY_VARS if name in os.environ}
    if proxy:
        os.environ["HTTPS_PROXY"] = os.environ["HTTP_PROXY"] = proxy
    try:
        yield
    finally:
        for name in _PROXY_VARS:
            os.environ.pop(name, None)
        os.environ.update(saved)


def _login(node: dict) -> str:
    # Deleted accounts come back as a null author.
    return (node.get("author") or {}).get("login", "")


def _comment_page(connection: dict) -> Page[dict]:
    page_info = connection.get("pageInfo") or {}
    return Page(
        items=[edge["node"] for edge in connection.get("edges") or []],
        next_cursor=page_info.get("endCursor"),
        has_more=bool(page_info.get("hasNextPage")),
    )


def _note(node: dict) -> Note:
    return Note(author=_login(node), body=node.get("body") or "", timestamp=node.get("createdAt") or "")


class GitHubBackend(BaseBackend):
    NAME = "GitHub"
    HAS_RESOLVED_STATUS = True

    def __init__(self, config: dict, client: Github | None = None):
        super().__init__(config)
        try:
            self._pull = int(config["pull"])
        except ValueError:
            raise ConfigError("The pull request ID must be a number.") from None
        # No retries: a failed page aborts the run.
        self._gh = client or Github(auth=Auth.Token(config["access_token"]), base_url=config["endpoint"], retry=None)
        self._flat_comments: list[FlatComment] = []

    def close(self) -> None:
        self._gh.close()

    # ------------------------------------------------------------------ #
    # GraphQL transport                                                    #
    # ------------------------------------------------------------------ #

    def _query(self, query: str, variables: dict) -> dict:
        """Run one query and return its ``pullRequest`` object."""
        base = {"org": self.config["org"], "repo": self.config["repo"], "pull": self._pull}
        try:
            with _proxy_environment(self.config.get("proxy")):
                _, data = self._gh.requester.graphql_query(query, {**base, **variables})
        except BadCredentialsException as e:
            raise AuthError("Authentication failed. Check the access token.") from e
        except UnknownObjectException as e:
            raise NotFoundError(_NOT_FOUND_MESSAGE) from e
        except RateLimitExceededException as e:
            raise RateLimitError(
                "The GitHub API rate limit was exceeded. Wait a while and run again."
            ) from e
        except GithubException as e:
            if _RATE_LIMIT_MARKER in str(e.data):
                raise RateLimitError("The GitHub API rate limit was exceeded. Wait a while and run again.") from e
            if e.status in (401, 403):
                raise AuthError("Authentication failed. Check the access token.") from e
            raise TransportError(f"GitHub API request failed (HTTP {e.status}).") from e
        except requests.RequestException as e:
            raise TransportError(f"Could not connect to GitHub ({type(e).__name__}). Check the proxy.") from e

        errors = data.get("errors") or []
        if errors:
            if errors[0].get("type") == "NOT_FOUND":
                raise NotFoundError(_NOT_FOUND_MESSAGE)
            raise TransportError(f"GitHub API returned an error: {errors[0].get('message', '')}")

        repository = (data.get("data") or {}).get("repository")
        if repository is None or repository.get("pullRequest") is None:
            raise NotFoundError(_NOT_FOUND_MESSAGE)
        return repository["pullRequest"]

    # ------------------------------------------------------------------ #
    # BaseBackend                                                          #
    # ------------------------------------------------------------------ #

    def fetch_pull_request(self) -> PullRequestInfo:
        """Page through issue comments and review bodies, keeping the PR metadata.

        The two collections are paged together. A collection that runs out
        keeps its last end cursor so that later requests return nothing new
        for it while the other one continues.
        """
        comments_cursor: str | None = None
        reviews_cursor: str | None = None
        self._flat_comments = []
        while True:
            pr = self._query(
                COMMENTS_QUERY,
                {"limit": self.page_size, "commentsCursor": comments_cursor, "reviewsCursor": reviews_cursor},
            )
            comments = _comment_page(pr.get("comments") or {})
            reviews = _comment_page(pr.get("reviews") or {})
            for node in comments.items + reviews.items:
                self._flat_comments.append(
                    FlatComment(
                        url=node.get("url") or "",
                        author=_login(node),
                        body=node.get("body") or "",
                        timestamp=node.get("createdAt") or "",
                    )
                )
            logger.debug("Fetched %d comment(s) and %d review(s)", len(comments.items), len(reviews.items))

            if comments.next_cursor:
                comments_cursor = comments.next_cursor
            if reviews.next_cursor:
                reviews_cursor = reviews.next_cursor
            if not (comments.has_more or reviews.has_more):
                break

        use_diff_count = self.config.get("use_diff_count", True)
        return PullRequestInfo(
            author=_login(pr),
            url=pr.get("url") or "",
            additions=pr.get("additions", 0) if use_diff_count else 0,
            deletions=pr.get("deletions", 0) if use_diff_count else 0,
        )

    def fetch_flat_comments(self) -> list[FlatComment]:
        return list(self._flat_comments)

    def fetch_threads(self) -> list[Thread]:
        return list(ThreadReconstructor(self, self.page_size).iter_threads())

    # ------------------------------------------------------------------ #
    # ThreadSource                                                         #
    # ------------------------------------------------------------------ #

    def fetch_thread_page(self, position: ThreadCursor, limit: int) -> Page[RawThread]:
        pr = self._query(
            THREADS_QUERY,
            {
                "reviewThreadsLimit": limit,
                "reviewThreadsCursor": position.previous_outer,
                "commentsLimit": self.page_size,
                "commentsCursor": position.inner,
            },
        )
        connection = pr.get("reviewThreads")
        if connection is None:
            raise DataShapeError("The GitHub response has no review threads.")

        items = []
        for edge in connection.get("edges") or []:
            node = edge["node"]
            comments = _comment_page(node.get("comments") or {})
            notes = Page(
                items=[_note(c) for c in comments.items],
                next_cursor=comments.next_cursor,
                has_more=comments.has_more,
            )
            items.append(
                RawThread(
                    thread_id=node["id"],
                    notes=notes,
                    url=(comments.items[0].get("url") or "") if comments.items else "",
                    resolved=bool(node.get("isResolved")),
                    cursor=edge.get("cursor"),
                )
            )
        page_info = connection.get("pageInfo") or {}
        return Page(items=items, next_cursor=page_info.get("endCursor"), has_more=bool(page_info.get("hasNextPage")))
