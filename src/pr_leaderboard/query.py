"""Search query construction for the GitHub issue search endpoint."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from pr_leaderboard.models import RepositoryId


def _quote(label: str) -> str:
    if any(ch.isspace() for ch in label):
        return f'"{label}"'
    return label


def format_label_qualifier(label: str) -> str:
    """``label:x``, quoting labels that contain whitespace."""
    return f"label:{_quote(label)}"


def format_labels_qualifier(labels: Sequence[str]) -> str:
    """Single ``label:`` qualifier matching any of *labels* (search OR form)."""
    return "label:" + ",".join(_quote(label) for label in labels)


def format_closed_range(start: date, end: date) -> str:
    return f"{start.isoformat()}..{end.isoformat()}"


def build_search_query(
    repo: RepositoryId,
    labels: str | Sequence[str],
    closed_range: str,
) -> str:
    """Build the ``q`` parameter for merged PRs in *repo* carrying *labels*.

    A single label string produces one ``label:`` qualifier; a sequence is
    combined with the OR form.
    """
    if isinstance(labels, str):
        label_part = format_label_qualifier(labels)
    else:
        label_part = format_labels_qualifier(labels)
    return " ".join([
        f"repo:{repo.full_name}",
        "is:pr",
        label_part,
        "is:merged",
        f"closed:{closed_range}",
    ])
