"""GitBucket backend: log in, scrape the pull request page, log out.

GitBucket offers no API for review comments, so the backend signs in with
a username and password, downloads the rendered pull request page and
hands it to the panel walker. The login session lives on the
requests.Session cookie jar for the duration of one run and is always
signed out afterwards.
"""

from __future__ import annotations

import logging

import requests

from prharvest_core.backends.base import BaseBackend
from prharvest_core.backends.http import REQUEST_TIMEOUT, build_session, check_status, send
from prharvest_core.errors import AuthError, ConfigError, TransportError
from prharvest_core.html.dom import from_markup
from prharvest_core.html.panels import GITBUCKET_PANEL_RULES, PanelRules, PanelWalk, walk_comment_list
from prharvest_core.models import FlatComment, PullRequestInfo, Thread

logger = logging.getLogger(__name__)


class GitBucketBackend(BaseBackend):
    NAME = "GitBucket"
    HAS_RESOLVED_STATUS = False

    def __init__(self, config: dict, session=None, rules: PanelRules = GITBUCKET_PANEL_RULES):
        super().__init__(config)
        username, sep, password = config["access_token"].partition(":")
        if not sep:
            raise ConfigError("The GitBucket access token must be the username and password joined by ':'.")
        self._username = username
        self._password = password
        self._endpoint = config["endpoint"]
        self._session = session or build_session(config.get("proxy"))
        self._rules = rules
        self._walk: PanelWalk | None = None

    @property
    def page_url(self) -> str:
        return f"{self._endpoint}/{self.config['org']}/{self.config['repo']}/pull/{self.config['pull']}"

    def close(self) -> None:
        self._session.close()

    def _download_page(self) -> str:
        """Sign in, fetch the pull request page and sign out again."""
        resp = send(self._session, "GET", f"{self._endpoint}/signin")
        if resp.status_code != 200:
            raise TransportError("Could not open the GitBucket sign-in page. Check the endpoint.")

        resp = send(
            self._session,
            "POST",
            f"{self._endpoint}/signin",
            data={"userName": self._username, "password": self._password},
        )
        if not 200 <= resp.status_code <= 399:
            raise TransportError(f"GitBucket sign-in failed: HTTP {resp.status_code}.")

        try:
            resp = send(self._session, "GET", self.page_url)
            if resp.status_code == 401:
                raise AuthError(
                    "Authentication failed or the account cannot access the repository. "
                    "Check the access token, organization and repository."
                )
            check_status(resp, "Pull request not found. Check the organization, repository and pull request ID.")
            return resp.text
        finally:
            self._sign_out()

    def _sign_out(self) -> None:
        try:
            self._session.get(f"{self._endpoint}/signout", timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            logger.warning("GitBucket sign-out failed: %s", e)

    def fetch_pull_request(self) -> PullRequestInfo:
        markup = self._download_page()
        self._walk = walk_comment_list(from_markup(markup), self.page_url, self._rules)
        # The page does not show line counts.
        return PullRequestInfo(author=self._walk.author, url=self.page_url)

    def fetch_flat_comments(self) -> list[FlatComment]:
        return list(self._walk.flat_comments) if self._walk else []

    def fetch_threads(self) -> list[Thread]:
        return list(self._walk.threads) if self._walk else []
