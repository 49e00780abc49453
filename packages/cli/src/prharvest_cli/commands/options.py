"""Options shared by the commands that run an extraction.

Every option defaults to None so that only values given on the command
line override the config file.
"""

from __future__ import annotations

import click

_EXTRACTION_OPTIONS = [
    click.option(
        "--target",
        type=click.Choice(["github", "gitlab", "gitbucket"]),
        default=None,
        help="Git hosting service.",
    ),
    click.option("--endpoint", default=None, help="API endpoint (GitHub/GitLab) or base URL (GitBucket)."),
    click.option(
        "--access-token",
        default=None,
        help="Access token. For GitBucket, username:password.",
    ),
    click.option("--org", default=None, help="Organization or owner. Not used by GitLab."),
    click.option("--repo", default=None, help="Repository name, or the project ID on GitLab."),
    click.option("--pull", default=None, help="Pull request (merge request) ID."),
    click.option("--postscript-prefix", default=None, help="Prefix joining follow-up notes. [default: (追記)]"),
    click.option("--delimiter", default=None, help="Line separating finding and response. [default: ~~]"),
    click.option("--review-times", default=None, help="Review iteration to report timing for. [default: 1]"),
    click.option(
        "--use-diff-count/--no-diff-count",
        default=None,
        help="Fetch added/deleted line counts.",
    ),
    click.option("--proxy", default=None, help="Proxy URL for every request."),
    click.option("--page-size", type=click.IntRange(1, 100), default=None, help="Items per page request (1-100)."),
    click.option(
        "--use-sjis-stderr/--no-sjis-stderr",
        default=None,
        help="Write error messages in Shift_JIS.",
    ),
]


def extraction_options(func):
    """Apply the shared extraction options to a click command."""
    for option in reversed(_EXTRACTION_OPTIONS):
        func = option(func)
    return func
