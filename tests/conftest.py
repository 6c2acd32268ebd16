"""Shared test fixtures for pr-leaderboard tests."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pytest

from pr_leaderboard.config import LeaderboardConfig
from pr_leaderboard.models import PullRequestRecord, RepositoryId


def make_pr_item(
    pr_id: int,
    user_id: int = 1,
    login: str = "alice",
    labels: Iterable[str] = (),
    repo: str = "octo-org/widgets",
) -> dict[str, Any]:
    """Build one raw search API item."""
    return {
        "id": pr_id,
        "number": pr_id % 10000,
        "html_url": f"https://github.com/{repo}/pull/{pr_id % 10000}",
        "state": "closed",
        "user": {
            "id": user_id,
            "login": login,
            "avatar_url": f"https://avatars.githubusercontent.com/u/{user_id}?v=4",
            "html_url": f"https://github.com/{login}",
        },
        "labels": [{"id": i, "name": name} for i, name in enumerate(labels)],
    }


def make_record(
    pr_id: int,
    user_id: int = 1,
    login: str = "alice",
    labels: Iterable[str] = (),
) -> PullRequestRecord:
    return PullRequestRecord.from_api(make_pr_item(pr_id, user_id, login, labels))


class RecordingSleep:
    """Async no-op replacement for ``asyncio.sleep`` that records delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def repo() -> RepositoryId:
    return RepositoryId(owner="octo-org", name="widgets")


@pytest.fixture
def config() -> LeaderboardConfig:
    return LeaderboardConfig()
