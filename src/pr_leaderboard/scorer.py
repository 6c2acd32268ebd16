"""Label-based scoring into a per-run contributor ledger."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from pr_leaderboard.config import ScoringConfig, normalize_label
from pr_leaderboard.models import ContributorAggregate, PullRequestRecord

__all__ = ["ScoreAccumulator", "normalize_label"]


class ScoreAccumulator:
    """Fold pull request records into a contributor ledger.

    The ledger maps GitHub user id to :class:`ContributorAggregate`. Scores
    only ever grow; each pull request id is credited at most once per
    accumulator, and each contributor receives the bonus at most once.
    """

    def __init__(self, scoring: ScoringConfig | None = None) -> None:
        self.scoring = scoring if scoring is not None else ScoringConfig()
        self.ledger: dict[int, ContributorAggregate] = {}
        self._credited: set[int] = set()
        self._lock = threading.Lock()

    def add(self, records: Iterable[PullRequestRecord]) -> int:
        """Credit *records* to their authors. Returns how many were newly credited."""
        credited = 0
        with self._lock:
            for record in records:
                if record.id in self._credited:
                    continue
                self._credited.add(record.id)
                self._credit(record)
                credited += 1
        return credited

    def _credit(self, record: PullRequestRecord) -> None:
        contributor = self.ledger.get(record.user.id)
        if contributor is None:
            contributor = ContributorAggregate.from_author(record.user)
            self.ledger[record.user.id] = contributor

        for label in record.labels:
            if self.scoring.is_bonus_label(label) and not contributor.bonus_applied:
                contributor.bonus_applied = True
                contributor.score += self.scoring.bonus_amount
            contributor.score += self.scoring.points_for(label)

        contributor.add_pr_url(record.html_url)

    def score_for(self, user_id: int) -> int:
        contributor = self.ledger.get(user_id)
        return contributor.score if contributor is not None else 0

    def __len__(self) -> int:
        return len(self.ledger)
