"""Access token fallbacks for when no token was configured.

Used only when neither ``--access-token``, the config file nor
PRHARVEST_ACCESS_TOKEN supplied a token. Each target has its own
environment variable; GitHub can also borrow the gh CLI session. GitBucket
has no fallback because it needs a username:password pair.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = {
    "github": "GITHUB_TOKEN",
    "gitlab": "GITLAB_TOKEN",
}

# Commands that print a token for the target on stdout.
TOKEN_COMMANDS = {
    "github": ["gh", "auth", "token"],
}


def _token_from_command(command: list[str]) -> str | None:
    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_access_token(target: str | None) -> str | None:
    """Return a token for ``target`` or None if no source has one. Never raises."""
    env_var = TOKEN_ENV_VARS.get(target)
    if env_var and os.environ.get(env_var):
        return os.environ[env_var]

    command = TOKEN_COMMANDS.get(target)
    if command:
        token = _token_from_command(command)
        if token:
            logger.debug("Resolved %s token via %s.", target, command[0])
            return token
    return None
