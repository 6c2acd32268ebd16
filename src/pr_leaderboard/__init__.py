"""pr-leaderboard - label-based merged pull request leaderboards."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from pr_leaderboard.config import LeaderboardConfig, load_config
from pr_leaderboard.exceptions import LeaderboardError
from pr_leaderboard.leaderboard import build_leaderboard
from pr_leaderboard.models import ContributorAggregate, Leaderboard, PullRequestRecord, RepositoryId
from pr_leaderboard.pipeline import generate_leaderboard
from pr_leaderboard.scorer import ScoreAccumulator

try:
    __version__ = version("pr-leaderboard")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ContributorAggregate",
    "Leaderboard",
    "LeaderboardConfig",
    "LeaderboardError",
    "PullRequestRecord",
    "RepositoryId",
    "ScoreAccumulator",
    "__version__",
    "build_leaderboard",
    "generate_leaderboard",
    "load_config",
]
