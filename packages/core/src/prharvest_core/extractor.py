"""Build the backend for the configured target and run one extraction."""

from __future__ import annotations

import logging

from prharvest_core.backends.base import BaseBackend
from prharvest_core.config import GITBUCKET, GITHUB, GITLAB, setup_endpoint, validate_config
from prharvest_core.errors import ConfigError
from prharvest_core.models import ReviewReport

logger = logging.getLogger(__name__)


def build_backend(config: dict) -> BaseBackend:
    """Instantiate the backend named by ``config["target"]``.

    Backend modules are imported lazily so that a GitLab run never needs
    PyGithub to import, and so on.
    """
    target = config.get("target")

    if target == GITHUB:
        from prharvest_core.backends.github import GitHubBackend

        return GitHubBackend(config)

    if target == GITLAB:
        from prharvest_core.backends.gitlab import GitLabBackend

        return GitLabBackend(config)

    if target == GITBUCKET:
        from prharvest_core.backends.gitbucket import GitBucketBackend

        return GitBucketBackend(config)

    raise ConfigError(f"Unknown target: {target!r}. Use github, gitlab or gitbucket.")


def run_extraction(config: dict, require_csv: bool = True) -> ReviewReport:
    """Validate ``config``, then fetch and merge every comment of the pull request.

    Raises ExtractionError (or a subclass) on any failure; the backend is
    closed either way.
    """
    validate_config(config, require_csv=require_csv)
    setup_endpoint(config)

    backend = build_backend(config)
    logger.info("Extracting %s/%s #%s from %s", config.get("org") or "-", config["repo"], config["pull"], backend.NAME)
    try:
        report = backend.extract()
    finally:
        backend.close()

    logger.info("Extracted %d record(s)", len(report.records))
    if report.session.is_empty():
        logger.info("No review time comment found for iteration %s", config["review_times"])
    return report
