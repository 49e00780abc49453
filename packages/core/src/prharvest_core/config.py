import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import yaml

from prharvest_core.errors import ConfigError

GITHUB = "github"
GITLAB = "gitlab"
GITBUCKET = "gitbucket"
TARGETS = (GITHUB, GITLAB, GITBUCKET)

DEFAULT_CONFIG: dict = {
    "target": None,
    "endpoint": None,  # GitHub/GitLab SaaS endpoints are filled in by setup_endpoint()
    "access_token": None,  # GitBucket expects "username:password"
    "org": None,  # not used by GitLab
    "repo": None,  # repository name, or the project ID on GitLab
    "pull": None,
    "postscript_prefix": "(追記)",
    "delimiter": "~~",  # not used by GitLab
    "review_times": "1",
    "use_diff_count": True,
    "csv_file": None,
    "use_sjis_file": True,
    "use_sjis_stderr": True,
    "proxy": None,
    "page_size": 100,
}

DEFAULT_ENDPOINTS = {
    GITHUB: "https://api.github.com",
    GITLAB: "https://gitlab.com/api/v4",
}


def load_config(config_path: str = ".prharvest.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prharvest.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse the config file {path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"The config file {path} must contain a mapping of settings.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Numbers in YAML come back as ints; these are compared as text.
    for key in ("repo", "pull", "review_times"):
        if config.get(key) is not None:
            config[key] = str(config[key])

    if not config.get("access_token"):
        config["access_token"] = os.environ.get("PRHARVEST_ACCESS_TOKEN")

    return config


def validate_config(config: dict, require_csv: bool = True) -> None:
    """Raise ConfigError describing the first missing or invalid setting.

    ``require_csv`` is False for commands that print instead of writing a file.
    """
    target = config.get("target")
    if not target:
        raise ConfigError("Set the Git hosting service with --target.")
    if target not in TARGETS:
        raise ConfigError("The target must be one of github, gitlab or gitbucket.")
    if target == GITBUCKET and not config.get("endpoint"):
        raise ConfigError("Set the GitBucket endpoint with --endpoint.")
    if not config.get("access_token"):
        raise ConfigError("Set the access token with --access-token.")
    if target in (GITHUB, GITBUCKET) and not config.get("org"):
        raise ConfigError("Set the organization with --org.")
    if not config.get("repo"):
        if target == GITLAB:
            raise ConfigError("Set the project ID with --repo.")
        raise ConfigError("Set the repository name with --repo.")
    if not config.get("pull"):
        if target == GITLAB:
            raise ConfigError("Set the merge request ID with --pull.")
        raise ConfigError("Set the pull request ID with --pull.")
    if target != GITLAB and not config.get("delimiter"):
        raise ConfigError("Set the delimiter with --delimiter.")
    if not config.get("review_times"):
        raise ConfigError("Set the review iteration with --review-times.")
    if require_csv and not config.get("csv_file"):
        raise ConfigError("Set the CSV output path with --csv-file.")
    page_size = config.get("page_size")
    if not isinstance(page_size, int) or isinstance(page_size, bool) or not 1 <= page_size <= 100:
        raise ConfigError("The page size must be between 1 and 100.")
    proxy = config.get("proxy")
    if proxy:
        parsed = urlparse(proxy)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError("The proxy URL is invalid.")


def setup_endpoint(config: dict) -> None:
    """Fill in the default endpoint for SaaS targets when none is configured."""
    default = DEFAULT_ENDPOINTS.get(config.get("target"))
    if default and not config.get("endpoint"):
        config["endpoint"] = default
    if config.get("endpoint"):
        config["endpoint"] = config["endpoint"].rstrip("/")
