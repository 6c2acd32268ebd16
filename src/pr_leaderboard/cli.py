"""Click-based CLI for pr-leaderboard."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from pr_leaderboard.config import LeaderboardConfig, load_config
from pr_leaderboard.exceptions import LeaderboardError
from pr_leaderboard.formatter import (
    format_cli_summary,
    format_ranking,
    read_leaderboard,
    write_leaderboard,
)
from pr_leaderboard.models import RepositoryId
from pr_leaderboard.pipeline import generate_leaderboard
from pr_leaderboard.query import build_search_query, format_closed_range


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(name)s: %(message)s",
    )


def _apply_overrides(
    config: LeaderboardConfig,
    projects: str | None,
    output: str | None,
    request_delay: float | None,
    repo_delay: float | None,
) -> LeaderboardConfig:
    if projects is not None:
        config = config.model_copy(update={
            "projects": config.projects.model_copy(update={"source": projects}),
        })
    if output is not None:
        config = config.model_copy(update={
            "output": config.output.model_copy(update={"path": output}),
        })
    rate_updates: dict[str, float] = {}
    if request_delay is not None:
        rate_updates["request_delay"] = request_delay
    if repo_delay is not None:
        rate_updates["repo_delay"] = repo_delay
    if rate_updates:
        config = config.model_copy(update={
            "rate_limit": config.rate_limit.model_copy(update=rate_updates),
        })
    return config


@click.group()
@click.version_option(package_name="pr-leaderboard")
def main() -> None:
    """pr-leaderboard - label-based merged PR leaderboard generator."""


@main.command()
@click.option("--projects", default=None, help="Project list file path or URL")
@click.option("--output", "-o", default=None, help="Leaderboard JSON output path")
@click.option("--token", envvar=["GITHUB_TOKEN", "GIT_TOKEN"], help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option(
    "--request-delay", type=click.FloatRange(min=0), default=None,
    help="Seconds to wait after every search request",
)
@click.option(
    "--repo-delay", type=click.FloatRange(min=0), default=None,
    help="Seconds to wait after every repository",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
def generate(
    projects: str | None,
    output: str | None,
    token: str | None,
    config_path: str | None,
    request_delay: float | None,
    repo_delay: float | None,
    verbose: bool,
) -> None:
    """Scan every participating repository and write the leaderboard."""
    if not token:
        click.echo("Error: GitHub token required. Set GITHUB_TOKEN or use --token.", err=True)
        sys.exit(1)

    _setup_logging(verbose)
    try:
        config = load_config(config_path)
        config = _apply_overrides(config, projects, output, request_delay, repo_delay)
        leaderboard, summary = asyncio.run(generate_leaderboard(token=token, config=config))
        path = write_leaderboard(leaderboard, config.output.path)
    except LeaderboardError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(format_cli_summary(leaderboard, summary, path, verbose=verbose))


@main.command()
@click.argument("repo")
@click.option("--config", "config_path", default=None, help="Config file path")
def query(repo: str, config_path: str | None) -> None:
    """Print the search queries issued for REPO (owner/name) without running them."""
    parts = repo.split("/")
    if len(parts) != 2 or not all(parts):
        click.echo("Error: REPO must be in owner/name format.", err=True)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except LeaderboardError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    repo_id = RepositoryId(owner=parts[0], name=parts[1])
    closed_range = format_closed_range(config.search.closed_from, config.search.closed_to)
    for label in config.search.identifying_labels:
        click.echo(build_search_query(repo_id, label, closed_range))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--top", type=click.IntRange(min=1), default=None, help="Show only the top N")
def show(path: str, top: int | None) -> None:
    """Print the ranking stored in an existing leaderboard file."""
    try:
        data = read_leaderboard(path)
    except ValueError as exc:
        click.echo(f"Error: {path} is not valid JSON: {exc}", err=True)
        sys.exit(1)

    entries = data.get("leaderboard") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        click.echo(f"Error: {path} has no leaderboard array.", err=True)
        sys.exit(1)

    if data.get("updatedTimestring"):
        click.echo(data["updatedTimestring"])
    click.echo(format_ranking(entries, top=top))
