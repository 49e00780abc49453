"""init command: interactive setup wizard that writes the config file.

The access token is never written to the file; it is read from the
environment at run time.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()

_TOKEN_HINTS = {
    "github": "Set GITHUB_TOKEN or run `gh auth login`.",
    "gitlab": "Set GITLAB_TOKEN to a personal access token with read_api scope.",
    "gitbucket": "Set PRHARVEST_ACCESS_TOKEN to username:password.",
}


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Create a config file for the current repository.

    Prompts for the hosting service and repository, detecting them from the
    git remote when possible, and writes the answers to the config file.
    """
    config_path = ctx.obj["config_path"]
    console.print("\n[bold cyan]prharvest init[/bold cyan] setup wizard\n")

    detected = _detect_remote()
    if detected:
        console.print(f"[dim]Detected remote: {detected[0]} {detected[1]}/{detected[2]}[/dim]")
    default_target, default_org, default_repo = detected or ("github", None, None)

    target = click.prompt(
        "Git hosting service",
        type=click.Choice(["github", "gitlab", "gitbucket"]),
        default=default_target,
    )
    config: dict = {"target": target}

    if target == "gitbucket":
        config["endpoint"] = click.prompt("GitBucket base URL (e.g. https://gitbucket.example.com/gitbucket)")
    elif click.confirm("Use a self-hosted endpoint?", default=False):
        config["endpoint"] = click.prompt("API endpoint")

    if target == "gitlab":
        config["repo"] = click.prompt("Project ID", default=default_repo)
    else:
        config["org"] = click.prompt("Organization or owner", default=default_org)
        config["repo"] = click.prompt("Repository name", default=default_repo)
        config["delimiter"] = click.prompt("Delimiter between finding and response", default="~~")

    config["csv_file"] = click.prompt("CSV output path", default="review.csv")
    config["use_sjis_file"] = click.confirm("Write the CSV in Shift_JIS?", default=True)

    _write_config(config_path, config)
    console.print(f"[green]Created {config_path}[/green]")
    console.print(f"[yellow]{_TOKEN_HINTS[target]}[/yellow]")
    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Extract a pull request with: [bold]prharvest extract --pull <number>[/bold]")


def _detect_remote() -> tuple[str, str, str] | None:
    """Guess (target, org, repo) from the origin remote of the current git checkout."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    url = result.stdout.strip()
    # https://github.com/owner/repo.git  or  git@github.com:owner/repo.git
    for host, target in (("github.com", "github"), ("gitlab.com", "gitlab")):
        if host in url:
            slug = url.split(host)[-1].lstrip("/:").removesuffix(".git")
            org, sep, repo = slug.rpartition("/")
            if sep and org and repo:
                return target, org, repo
    return None


def _write_config(config_path: str, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    path = Path(config_path)
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    existing.update(config)
    path.write_text(
        yaml.dump(existing, default_flow_style=False, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
