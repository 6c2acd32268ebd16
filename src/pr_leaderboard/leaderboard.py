"""Turn the contributor ledger into a ranked leaderboard."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime

from pr_leaderboard.models import ContributorAggregate, Leaderboard, LeaderboardEntry


def rank_contributors(
    ledger: Mapping[int, ContributorAggregate],
) -> list[ContributorAggregate]:
    """Sort by score descending; equal scores fall back to user id ascending."""
    return sorted(ledger.values(), key=lambda c: (-c.score, c.user_id))


def build_leaderboard(
    ledger: Mapping[int, ContributorAggregate],
    cutoff_note: str,
    now: datetime | None = None,
) -> Leaderboard:
    """Build the serializable leaderboard. Does not write anything."""
    return Leaderboard(
        entries=[LeaderboardEntry.from_aggregate(c) for c in rank_contributors(ledger)],
        updated_at=now if now is not None else datetime.now(UTC),
        cutoff_note=cutoff_note,
    )
