"""Data models for pr-leaderboard."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from pr_leaderboard.exceptions import ProjectListError


class RepositoryId(BaseModel):
    """A GitHub repository identified by owner and name."""
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_url(cls, url: str) -> RepositoryId:
        """Derive owner/name from a project URL by path position.

        ``https://github.com/owner/name`` splits into
        ``["https:", "", "github.com", "owner", "name"]``; segment 3 is the
        owner and segment 4 the name.
        """
        parts = url.strip().rstrip("/").split("/")
        if len(parts) < 4 or not parts[3]:
            raise ProjectListError(f"Cannot derive repository from project link: {url!r}")
        name = parts[4] if len(parts) > 4 else ""
        name = name.removesuffix(".git")
        return cls(owner=parts[3], name=name)

    def __str__(self) -> str:
        return self.full_name


class PullRequestAuthor(BaseModel):
    """The author of a pull request as reported by the search API."""
    id: int
    login: str
    avatar_url: str = ""
    html_url: str = ""


class PullRequestRecord(BaseModel):
    """A merged pull request returned by the issue search endpoint."""
    model_config = ConfigDict(frozen=True)

    id: int
    number: int = 0
    html_url: str
    user: PullRequestAuthor
    labels: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> PullRequestRecord:
        """Parse one element of the search response ``items`` array."""
        labels = tuple(
            label["name"] if isinstance(label, dict) else str(label)
            for label in item.get("labels") or []
        )
        return cls(
            id=item["id"],
            number=item.get("number", 0),
            html_url=item["html_url"],
            user=PullRequestAuthor.model_validate(item["user"]),
            labels=labels,
        )


class SearchPage(BaseModel):
    """One page of search results."""
    total_count: int = 0
    items: list[PullRequestRecord] = []
    failed: bool = False

    @classmethod
    def empty(cls, failed: bool = True) -> SearchPage:
        return cls(total_count=0, items=[], failed=failed)


class ContributorAggregate(BaseModel):
    """Running totals for one contributor, keyed by GitHub user id."""
    user_id: int
    login: str
    avatar_url: str = ""
    url: str = ""
    score: int = 0
    # Insertion-ordered set of credited pull request URLs.
    pr_urls: dict[str, None] = Field(default_factory=dict)
    bonus_applied: bool = False

    @classmethod
    def from_author(cls, author: PullRequestAuthor) -> ContributorAggregate:
        return cls(
            user_id=author.id,
            login=author.login,
            avatar_url=author.avatar_url,
            url=author.html_url,
        )

    def add_pr_url(self, url: str) -> None:
        self.pr_urls.setdefault(url, None)


class LeaderboardEntry(BaseModel):
    """Serializable leaderboard row."""
    avatar_url: str
    login: str
    url: str
    score: int
    pr_urls: list[str] = []
    bonus_applied: bool = False

    @classmethod
    def from_aggregate(cls, aggregate: ContributorAggregate) -> LeaderboardEntry:
        return cls(
            avatar_url=aggregate.avatar_url,
            login=aggregate.login,
            url=aggregate.url,
            score=aggregate.score,
            pr_urls=list(aggregate.pr_urls),
            bonus_applied=aggregate.bonus_applied,
        )


class Leaderboard(BaseModel):
    """Ranked contributors plus generation metadata."""
    entries: list[LeaderboardEntry] = []
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    cutoff_note: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def updated_timestring(self) -> str:
        local = self.updated_at.astimezone().strftime("%m/%d/%Y, %I:%M:%S %p")
        if not self.cutoff_note:
            return local
        return f"{local} — {self.cutoff_note}"

    def to_export(self) -> dict[str, Any]:
        """Build the JSON artifact document."""
        return {
            "leaderboard": [entry.model_dump() for entry in self.entries],
            "success": True,
            "updatedAt": int(self.updated_at.timestamp() * 1000),
            "generated": True,
            "updatedTimestring": self.updated_timestring,
        }


class ScanResult(BaseModel):
    """Outcome of scanning one repository across all label variants."""
    repo: RepositoryId
    records: list[PullRequestRecord] = []
    requests: int = 0
    duplicates: int = 0
    skipped: bool = False


class RunSummary(BaseModel):
    """Counters collected while generating a leaderboard."""
    repos_total: int = 0
    repos_skipped: list[str] = []
    requests: int = 0
    prs_credited: int = 0
    duplicates: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def repos_scanned(self) -> int:
        return self.repos_total - len(self.repos_skipped)
