"""Tests for backend selection and the extraction run."""

import os
from unittest.mock import MagicMock

import pytest

from prharvest_core.backends.gitbucket import GitBucketBackend
from prharvest_core.backends.github import GitHubBackend
from prharvest_core.backends.gitlab import GitLabBackend
from prharvest_core.errors import ConfigError, TransportError
from prharvest_core.extractor import build_backend, run_extraction
from prharvest_core.models import PullRequestInfo, ReviewReport, ReviewSession


def _config(**overrides):
    config = {
        "target": "github",
        "endpoint": "https://api.github.com",
        "access_token": "tok",
        "org": "acme",
        "repo": "widgets",
        "pull": "1",
        "postscript_prefix": "(追記)",
        "delimiter": "~~",
        "review_times": "1",
        "use_diff_count": True,
        "csv_file": "out.csv",
        "use_sjis_file": True,
        "use_sjis_stderr": True,
        "proxy": None,
        "page_size": 100,
    }
    config.update(overrides)
    return config


class TestBuildBackend:
    def test_github(self, mocker):
        mocker.patch("prharvest_core.backends.github.Github")
        assert isinstance(build_backend(_config()), GitHubBackend)

    def test_gitlab(self):
        assert isinstance(build_backend(_config(target="gitlab")), GitLabBackend)

    def test_gitbucket(self):
        assert isinstance(build_backend(_config(target="gitbucket", access_token="u:p")), GitBucketBackend)

    def test_unknown_target(self):
        with pytest.raises(ConfigError, match="Unknown target"):
            build_backend(_config(target="svn"))

    def test_github_proxy_exported_to_environment(self, mocker, monkeypatch):
        monkeypatch.delenv("HTTPS_PROXY", raising=False)
        monkeypatch.delenv("HTTP_PROXY", raising=False)
        mocker.patch("prharvest_core.backends.github.Github")
        build_backend(_config(proxy="http://proxy.local:3128"))
        assert os.environ["HTTPS_PROXY"] == "http://proxy.local:3128"


class TestRunExtraction:
    def test_validates_before_building(self, mocker):
        build = mocker.patch("prharvest_core.extractor.build_backend")
        with pytest.raises(ConfigError):
            run_extraction(_config(org=None))
        build.assert_not_called()

    def test_fills_endpoint_and_returns_report(self, mocker):
        report = ReviewReport(info=PullRequestInfo(author="a", url="u"), session=ReviewSession())
        backend = MagicMock()
        backend.extract.return_value = report
        build = mocker.patch("prharvest_core.extractor.build_backend", return_value=backend)

        config = _config(target="gitlab", endpoint=None, org=None)
        assert run_extraction(config) is report

        assert build.call_args.args[0]["endpoint"] == "https://gitlab.com/api/v4"
        backend.close.assert_called_once()

    def test_closes_backend_on_failure(self, mocker):
        backend = MagicMock()
        backend.extract.side_effect = TransportError("down")
        mocker.patch("prharvest_core.extractor.build_backend", return_value=backend)

        with pytest.raises(TransportError):
            run_extraction(_config())
        backend.close.assert_called_once()

    def test_csv_not_required_for_preview(self, mocker):
        backend = MagicMock()
        backend.extract.return_value = ReviewReport(info=PullRequestInfo(author="a", url="u"))
        mocker.patch("prharvest_core.extractor.build_backend", return_value=backend)
        run_extraction(_config(csv_file=None), require_csv=False)
