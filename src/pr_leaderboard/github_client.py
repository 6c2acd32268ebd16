"""Async GitHub search client and the rate-limited page fetcher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import httpx

from pr_leaderboard.config import MAX_PAGE_SIZE, LeaderboardConfig, load_config
from pr_leaderboard.exceptions import GitHubAPIError, RateLimitExhaustedError, RepoNotFoundError
from pr_leaderboard.models import PullRequestRecord, SearchPage

logger = logging.getLogger(__name__)

_GITHUB_BASE_URL = "https://api.github.com"
_SEARCH_PATH = "/search/issues"

SleepFn = Callable[[float], Awaitable[None]]


class GitHubClient:
    """Async client for the GitHub issue/PR search endpoint."""

    def __init__(
        self,
        token: str,
        config: LeaderboardConfig | None = None,
    ) -> None:
        self._token = token
        self._config = config if config is not None else load_config()
        self._client = httpx.AsyncClient(
            base_url=_GITHUB_BASE_URL,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github.v3+json",
            },
            timeout=self._config.rate_limit.timeout,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._client.aclose()

    async def search_issues(
        self, query: str, page: int = 1, per_page: int = MAX_PAGE_SIZE
    ) -> SearchPage:
        """Run one search request and parse the page.

        Raises:
            RateLimitExhaustedError: On 403 with a rate-limit message or on 429.
            RepoNotFoundError: On 404, or 422 (search validation failure, which
                GitHub returns for repositories that do not exist).
            GitHubAPIError: For any other non-200 response.
        """
        response = await self._client.get(
            _SEARCH_PATH,
            params={"q": query, "per_page": per_page, "page": page},
        )

        if response.status_code in (403, 429):
            body = response.json() if response.content else {}
            message = body.get("message", "") if isinstance(body, dict) else ""
            if response.status_code == 429 or "rate limit" in message.lower():
                reset_header = response.headers.get("X-RateLimit-Reset")
                if reset_header:
                    reset_at = datetime.fromtimestamp(int(reset_header), tz=UTC)
                else:
                    reset_at = datetime.now(UTC)
                raise RateLimitExhaustedError(reset_at=reset_at)

        if response.status_code in (404, 422):
            raise RepoNotFoundError(repo=_repo_from_query(query), status_code=response.status_code)

        if response.status_code != 200:
            remaining = response.headers.get("X-RateLimit-Remaining")
            raise GitHubAPIError(
                message=f"GitHub API returned {response.status_code}",
                status_code=response.status_code,
                rate_limit_remaining=int(remaining) if remaining else None,
            )

        data = response.json()
        if not isinstance(data, dict):
            raise GitHubAPIError("Unexpected search response body", status_code=200)
        items: list[PullRequestRecord] = []
        for item in data.get("items") or []:
            try:
                items.append(PullRequestRecord.from_api(item))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Dropping malformed search item in %r: %s", query, exc)
        return SearchPage(total_count=data.get("total_count", 0), items=items)


def _repo_from_query(query: str) -> str:
    for term in query.split():
        if term.startswith("repo:"):
            return term.removeprefix("repo:")
    return "unknown"


class PageFetcher:
    """Fetch single search pages, never raising, always pausing afterwards.

    Every request, successful or not, is followed by ``sleep(request_delay)``
    before control returns to the caller, so callers issuing requests back to
    back stay under the search rate limit.
    """

    def __init__(
        self,
        client: GitHubClient,
        page_size: int = MAX_PAGE_SIZE,
        request_delay: float = 1.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._client = client
        self.page_size = min(page_size, MAX_PAGE_SIZE)
        self.request_delay = request_delay
        self._sleep = sleep
        self.requests_made = 0

    async def fetch(self, query: str, page: int = 1) -> SearchPage:
        """Fetch *page* of *query*; failures yield an empty page marked ``failed``."""
        self.requests_made += 1
        try:
            result = await self._client.search_issues(query, page=page, per_page=self.page_size)
        except (GitHubAPIError, httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Search failed (page %d) for %r: %s", page, query, exc)
            result = SearchPage.empty(failed=True)
        await self._sleep(self.request_delay)
        return result
