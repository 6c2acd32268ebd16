"""End-to-end leaderboard generation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from pr_leaderboard.config import LeaderboardConfig, load_config
from pr_leaderboard.github_client import GitHubClient, PageFetcher, SleepFn
from pr_leaderboard.leaderboard import build_leaderboard
from pr_leaderboard.models import Leaderboard, RepositoryId, RunSummary
from pr_leaderboard.projects import load_projects
from pr_leaderboard.query import format_closed_range
from pr_leaderboard.scanner import LabelScanner
from pr_leaderboard.scorer import ScoreAccumulator

logger = logging.getLogger(__name__)


async def collect_scores(
    repos: Sequence[RepositoryId],
    client: GitHubClient,
    config: LeaderboardConfig,
    accumulator: ScoreAccumulator,
    sleep: SleepFn = asyncio.sleep,
) -> RunSummary:
    """Scan *repos* in order, folding every scan into *accumulator*.

    Repositories are processed strictly one at a time with ``repo_delay``
    after each; requests within a repository are paced by the fetcher.
    """
    fetcher = PageFetcher(
        client,
        page_size=config.search.page_size,
        request_delay=config.rate_limit.request_delay,
        sleep=sleep,
    )
    scanner = LabelScanner(
        fetcher,
        labels=config.search.identifying_labels,
        closed_range=format_closed_range(config.search.closed_from, config.search.closed_to),
    )
    summary = RunSummary(repos_total=len(repos))

    for index, repo in enumerate(repos, start=1):
        logger.info("Processing %s (%d/%d)", repo, index, len(repos))
        result = await scanner.scan_with_stats(repo)
        if result.skipped:
            summary.repos_skipped.append(repo.full_name)
        summary.prs_credited += accumulator.add(result.records)
        summary.duplicates += result.duplicates
        await sleep(config.rate_limit.repo_delay)

    summary.requests = fetcher.requests_made
    return summary


async def generate_leaderboard(
    token: str,
    config: LeaderboardConfig | None = None,
    repos: Sequence[RepositoryId] | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> tuple[Leaderboard, RunSummary]:
    """Load projects (unless given), scan them all, and build the leaderboard.

    A project list that cannot be loaded raises
    :class:`~pr_leaderboard.exceptions.ProjectListError` before any request
    is made. Network failures never abort the run.
    """
    if config is None:
        config = load_config()
    if repos is None:
        repos = await load_projects(
            config.projects.source,
            link_field=config.projects.link_field,
            timeout=config.rate_limit.timeout,
        )

    accumulator = ScoreAccumulator(config.scoring)
    async with GitHubClient(token=token, config=config) as client:
        summary = await collect_scores(repos, client, config, accumulator, sleep=sleep)

    leaderboard = build_leaderboard(accumulator.ledger, config.output.cutoff_note)
    logger.info(
        "Leaderboard generation complete: %d contributors from %d/%d repos",
        len(leaderboard.entries), summary.repos_scanned, summary.repos_total,
    )
    return leaderboard, summary
