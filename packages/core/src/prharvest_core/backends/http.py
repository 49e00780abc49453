"""requests plumbing shared by the REST and HTML backends."""

from __future__ import annotations

import logging

import requests

from prharvest_core.errors import AuthError, DataShapeError, NotFoundError, RateLimitError, TransportError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


def build_session(proxy: str | None = None) -> requests.Session:
    """Return a session that uses ``proxy`` for every request, or no proxy at all.

    Without a configured proxy, proxy variables from the environment are
    ignored as well.
    """
    session = requests.Session()
    if proxy:
        session.proxies.update({"http": proxy, "https": proxy})
    else:
        session.trust_env = False
    return session


def send(session: requests.Session, method: str, url: str, **kwargs) -> requests.Response:
    """Issue one request, mapping connection failures to TransportError."""
    logger.debug("%s %s", method, url)
    try:
        return session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"Could not connect to {url} ({type(e).__name__}). Check the endpoint and proxy.") from e


def check_status(resp: requests.Response, not_found_message: str, rate_limit_marker: str | None = None) -> None:
    """Raise the matching ExtractionError for a non-2xx response."""
    if 200 <= resp.status_code <= 299:
        return
    if resp.status_code in (401, 403):
        raise AuthError("Authentication failed. Check the access token.")
    if resp.status_code == 404:
        raise NotFoundError(not_found_message)
    if resp.status_code == 429 or (rate_limit_marker and rate_limit_marker in resp.text):
        raise RateLimitError("The API rate limit was exceeded. Wait a while and run again.")
    raise TransportError(f"Unexpected response from {resp.url}: HTTP {resp.status_code}.")


def read_json(resp: requests.Response):
    try:
        return resp.json()
    except ValueError as e:
        raise DataShapeError(f"The response from {resp.url} is not valid JSON.") from e
