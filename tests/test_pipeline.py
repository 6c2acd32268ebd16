"""End-to-end tests for leaderboard generation against a mocked search API."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import httpx
import pytest
import respx
from conftest import RecordingSleep, make_pr_item

from pr_leaderboard.config import LeaderboardConfig, ProjectsConfig
from pr_leaderboard.exceptions import ProjectListError
from pr_leaderboard.models import RepositoryId
from pr_leaderboard.pipeline import generate_leaderboard

SEARCH_URL = "https://api.github.com/search/issues"
_REPO_RE = re.compile(r"repo:(\S+)")
_LABEL_RE = re.compile(r'label:("[^"]+"|\S+)')


class FakeSearchAPI:
    """respx side effect serving search results keyed by (repo, label, page)."""

    def __init__(self) -> None:
        self.results: dict[tuple[str, str, int], dict[str, Any]] = {}
        self.failures: dict[tuple[str, str, int], int] = {}
        self.calls: list[tuple[str, str, int]] = []

    def add(self, repo: str, label: str, items: list[dict[str, Any]],
            page: int = 1, total: int | None = None) -> None:
        self.results[(repo, label, page)] = {
            "total_count": len(items) if total is None else total,
            "incomplete_results": False,
            "items": items,
        }

    def fail(self, repo: str, label: str, status: int, page: int = 1) -> None:
        self.failures[(repo, label, page)] = status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        q = request.url.params["q"]
        repo = _REPO_RE.search(q).group(1)  # type: ignore[union-attr]
        label = _LABEL_RE.search(q).group(1).strip('"')  # type: ignore[union-attr]
        page = int(request.url.params.get("page", "1"))
        key = (repo, label, page)
        self.calls.append(key)
        if key in self.failures:
            return httpx.Response(self.failures[key], json={"message": "Not Found"})
        return httpx.Response(
            200, json=self.results.get(key, {"total_count": 0, "items": []})
        )


@pytest.fixture
def api() -> FakeSearchAPI:
    return FakeSearchAPI()


def _repos(*names: str) -> list[RepositoryId]:
    return [RepositoryId(owner=n.split("/")[0], name=n.split("/")[1]) for n in names]


class TestGenerateLeaderboard:
    @respx.mock
    async def test_single_pr_with_bonus(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        api.add("a/one", "gssoc25", [
            make_pr_item(1, user_id=11, login="ursula", labels=["gssoc25", "level2", "postman"]),
        ])

        board, summary = await generate_leaderboard(
            "tok", config=config, repos=_repos("a/one"), sleep=sleep
        )

        assert len(board.entries) == 1
        entry = board.entries[0]
        assert entry.login == "ursula"
        assert entry.score == 507
        assert entry.pr_urls == ["https://github.com/octo-org/widgets/pull/1"]
        assert entry.bonus_applied is True
        assert summary.prs_credited == 1

    @respx.mock
    async def test_duplicate_across_label_variants_counted_once(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        shared = make_pr_item(5, labels=["gssoc25", "gssoc 25", "level3"])
        api.add("a/one", "gssoc25", [shared])
        api.add("a/one", "gssoc 25", [shared])

        board, summary = await generate_leaderboard(
            "tok", config=config, repos=_repos("a/one"), sleep=sleep
        )

        assert board.entries[0].score == 10
        assert len(board.entries[0].pr_urls) == 1
        assert summary.duplicates == 1

    @respx.mock
    async def test_missing_repository_skipped(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        api.fail("gone/repo", "gssoc25", 404)
        api.add("a/one", "gssoc25", [make_pr_item(1, labels=["level1"])])

        board, summary = await generate_leaderboard(
            "tok", config=config, repos=_repos("gone/repo", "a/one"), sleep=sleep
        )

        assert [e.score for e in board.entries] == [3]
        assert summary.repos_skipped == ["gone/repo"]
        assert summary.repos_scanned == 1
        assert [c for c in api.calls if c[0] == "gone/repo"] == [("gone/repo", "gssoc25", 1)]

    @respx.mock
    async def test_pagination_and_request_pacing(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        page1 = [make_pr_item(i, labels=["level1"]) for i in range(1, 101)]
        page2 = [make_pr_item(i, labels=["level1"]) for i in range(101, 201)]
        page3 = [make_pr_item(i, labels=["level1"]) for i in range(201, 251)]
        api.add("a/one", "gssoc25", page1, page=1, total=250)
        api.add("a/one", "gssoc25", page2, page=2, total=250)
        api.add("a/one", "gssoc25", page3, page=3, total=250)

        board, summary = await generate_leaderboard(
            "tok", config=config, repos=_repos("a/one"), sleep=sleep
        )

        gssoc_calls = [c for c in api.calls if c[1] == "gssoc25"]
        assert gssoc_calls == [("a/one", "gssoc25", 1), ("a/one", "gssoc25", 2),
                               ("a/one", "gssoc25", 3)]
        assert board.entries[0].score == 250 * 3
        # 3 pages + 2 other label variants, each followed by the request delay,
        # then one repository delay.
        assert summary.requests == 5
        assert sleep.calls == [1.0] * 5 + [3.0]

    @respx.mock
    async def test_repositories_processed_in_order(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)

        await generate_leaderboard(
            "tok", config=config, repos=_repos("z/last", "a/first"), sleep=sleep
        )

        repos_in_order = [c[0] for c in api.calls]
        assert repos_in_order == ["z/last"] * 3 + ["a/first"] * 3
        assert sleep.calls.count(3.0) == 2

    @respx.mock
    async def test_ranking_across_repositories(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        api.add("a/one", "gssoc25", [
            make_pr_item(1, user_id=1, login="alice", labels=["level1"]),
            make_pr_item(2, user_id=2, login="bob", labels=["level3"]),
        ])
        api.add("b/two", "GSSoC'25", [
            make_pr_item(3, user_id=1, login="alice", labels=["level3", "postman"]),
            make_pr_item(4, user_id=3, login="carol", labels=["level3"]),
        ])

        board, _ = await generate_leaderboard(
            "tok", config=config, repos=_repos("a/one", "b/two"), sleep=sleep
        )

        assert [(e.login, e.score) for e in board.entries] == [
            ("alice", 513), ("bob", 10), ("carol", 10),
        ]

    async def test_unreadable_project_list_is_fatal(
        self, tmp_path: Path, sleep: RecordingSleep
    ) -> None:
        config = LeaderboardConfig(projects=ProjectsConfig(source=str(tmp_path / "nope.json")))

        with respx.mock(assert_all_called=False) as router:
            route = router.get(SEARCH_URL)
            with pytest.raises(ProjectListError):
                await generate_leaderboard("tok", config=config, sleep=sleep)

        assert route.call_count == 0

    @respx.mock
    async def test_loads_project_list(
        self, api: FakeSearchAPI, tmp_path: Path, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        projects = tmp_path / "projects.json"
        projects.write_text(json.dumps([{"project_link": "https://github.com/a/one"}]))
        api.add("a/one", "gssoc 25", [make_pr_item(1, labels=["level2"])])
        config = LeaderboardConfig(projects=ProjectsConfig(source=str(projects)))

        board, summary = await generate_leaderboard("tok", config=config, sleep=sleep)

        assert summary.repos_total == 1
        assert board.entries[0].score == 7

    @respx.mock
    async def test_loads_remote_project_list(
        self, api: FakeSearchAPI, sleep: RecordingSleep
    ) -> None:
        sheet_url = "https://opensheet.example.com/sheet/JSON"
        respx.get(sheet_url).mock(
            return_value=httpx.Response(200, json=[{"project_link": "https://github.com/a/one"}])
        )
        respx.get(SEARCH_URL).mock(side_effect=api)
        api.add("a/one", "gssoc25", [make_pr_item(1, labels=["level1"])])
        config = LeaderboardConfig(projects=ProjectsConfig(source=sheet_url))

        board, summary = await generate_leaderboard("tok", config=config, sleep=sleep)

        assert summary.repos_total == 1
        assert board.entries[0].score == 3

    @respx.mock
    async def test_malformed_item_does_not_skip_repo(
        self, api: FakeSearchAPI, config: LeaderboardConfig, sleep: RecordingSleep
    ) -> None:
        respx.get(SEARCH_URL).mock(side_effect=api)
        ghost = make_pr_item(2, user_id=22, login="ghost", labels=["level2"])
        ghost["user"] = None
        api.add("a/one", "gssoc25", [make_pr_item(1, labels=["level3"]), ghost])

        board, summary = await generate_leaderboard(
            "tok", config=config, repos=_repos("a/one"), sleep=sleep
        )

        assert summary.repos_skipped == []
        assert [(e.login, e.score) for e in board.entries] == [("alice", 10)]
