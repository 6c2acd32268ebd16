"""Per-repository scan across identifying label variants."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from pr_leaderboard.github_client import PageFetcher
from pr_leaderboard.models import PullRequestRecord, RepositoryId, ScanResult, SearchPage
from pr_leaderboard.query import build_search_query

logger = logging.getLogger(__name__)


class LabelScanner:
    """Collect merged PRs for a repository, one label variant at a time.

    Each label variant is queried separately and results are merged through a
    dedup set keyed by pull request id, so a PR tagged with several spellings
    of the program label is returned once.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        labels: Sequence[str],
        closed_range: str,
    ) -> None:
        self._fetcher = fetcher
        self.labels = list(labels)
        self.closed_range = closed_range

    async def scan(
        self, repo: RepositoryId, seen: set[int] | None = None
    ) -> list[PullRequestRecord]:
        """Return the de-duplicated PRs found in *repo* across all label variants."""
        result = await self.scan_with_stats(repo, seen)
        return result.records

    async def scan_with_stats(
        self, repo: RepositoryId, seen: set[int] | None = None
    ) -> ScanResult:
        if seen is None:
            seen = set()
        result = ScanResult(repo=repo)
        page_size = self._fetcher.page_size

        for index, label in enumerate(self.labels):
            query = build_search_query(repo, label, self.closed_range)
            first = await self._fetch(query, 1, result)

            if first.failed:
                if index == 0:
                    logger.warning("Skipping %s: first query failed (label %r)", repo, label)
                    result.skipped = True
                    return result
                logger.warning("PRs not found for %s (label: %s)", repo, label)
                continue

            self._collect(first, seen, result)

            if first.total_count > page_size:
                pages = math.ceil(first.total_count / page_size)
                for page in range(2, pages + 1):
                    page_result = await self._fetch(query, page, result)
                    self._collect(page_result, seen, result)

        logger.debug(
            "%s: %d PRs, %d duplicates, %d requests",
            repo, len(result.records), result.duplicates, result.requests,
        )
        return result

    async def _fetch(self, query: str, page: int, result: ScanResult) -> SearchPage:
        result.requests += 1
        return await self._fetcher.fetch(query, page)

    @staticmethod
    def _collect(page: SearchPage, seen: set[int], result: ScanResult) -> None:
        for record in page.items:
            if record.id in seen:
                result.duplicates += 1
                continue
            seen.add(record.id)
            result.records.append(record)
