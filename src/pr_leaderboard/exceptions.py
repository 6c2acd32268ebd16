"""Custom exception hierarchy for pr-leaderboard."""

from __future__ import annotations

from datetime import datetime


class LeaderboardError(Exception):
    """Base exception for pr-leaderboard."""


class GitHubAPIError(LeaderboardError):
    """Error from the GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        rate_limit_remaining: int | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.rate_limit_remaining = rate_limit_remaining


class RateLimitExhaustedError(GitHubAPIError):
    """GitHub API rate limit exhausted."""

    def __init__(self, reset_at: datetime, rate_limit_remaining: int = 0):
        self.reset_at = reset_at
        super().__init__(
            f"Rate limit exhausted. Resets at {reset_at.isoformat()}",
            status_code=403,
            rate_limit_remaining=rate_limit_remaining,
        )


class RepoNotFoundError(GitHubAPIError):
    """GitHub repository not found or not searchable."""

    def __init__(self, repo: str, status_code: int = 404):
        self.repo = repo
        super().__init__(f"Repository not found: {repo}", status_code=status_code)


class ProjectListError(LeaderboardError):
    """The participating project list could not be read or parsed."""


class ConfigError(LeaderboardError):
    """Error with configuration."""


class OutputWriteError(LeaderboardError):
    """The leaderboard artifact could not be written."""
