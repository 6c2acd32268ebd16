"""Output formatting and the leaderboard artifact writer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from pr_leaderboard.exceptions import OutputWriteError
from pr_leaderboard.models import Leaderboard, RunSummary

_MEDALS = ("\U0001f947", "\U0001f948", "\U0001f949")


def format_json(leaderboard: Leaderboard) -> str:
    """Serialize the artifact document with 2-space indentation."""
    return json.dumps(leaderboard.to_export(), indent=2, ensure_ascii=False)


def write_leaderboard(leaderboard: Leaderboard, path: str | Path) -> Path:
    """Write the artifact to *path* as UTF-8 JSON.

    Raises:
        OutputWriteError: If the file cannot be written.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(format_json(leaderboard) + "\n", encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(f"Could not write leaderboard to {target}: {exc}") from exc
    return target


def read_leaderboard(path: str | Path) -> dict[str, Any]:
    """Read a previously written artifact."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def _rank_label(rank: int) -> str:
    if rank <= len(_MEDALS):
        return _MEDALS[rank - 1]
    return f"{rank:>2}."


def format_ranking(entries: list[dict[str, Any]], top: int | None = None) -> str:
    """Format artifact entries as a ranked table for the terminal."""
    shown = entries if top is None else entries[:top]
    if not shown:
        return "No contributors yet."

    width = max(len(str(e.get("login", ""))) for e in shown)
    lines: list[str] = []
    for rank, entry in enumerate(shown, start=1):
        login = str(entry.get("login", "")).ljust(width)
        score = click.style(f"{entry.get('score', 0):>5}", bold=True)
        prs = len(entry.get("pr_urls", []))
        line = f"{_rank_label(rank)} {login}  {score} pts  {prs} PR{'s' if prs != 1 else ''}"
        if entry.get("bonus_applied"):
            line += click.style("  +bonus", fg="yellow")
        lines.append(line)
    return "\n".join(lines)


def format_cli_summary(
    leaderboard: Leaderboard,
    summary: RunSummary,
    output_path: str | Path,
    verbose: bool = False,
) -> str:
    """Format the end-of-run summary."""
    lines: list[str] = [
        click.style("Leaderboard updated", fg="green", bold=True) + f": {output_path}",
        f"Contributors: {len(leaderboard.entries)} | "
        f"PRs credited: {summary.prs_credited} | "
        f"Repos: {summary.repos_scanned}/{summary.repos_total}",
    ]

    if summary.repos_skipped:
        lines.append(
            click.style(f"Skipped {len(summary.repos_skipped)} repos", fg="yellow")
        )

    if verbose:
        lines.append(f"Requests: {summary.requests} | Duplicate sightings: {summary.duplicates}")
        for repo in summary.repos_skipped:
            lines.append(f"  - {repo}")
        lines.append("")
        lines.append(format_ranking(
            [entry.model_dump() for entry in leaderboard.entries], top=10,
        ))

    return "\n".join(lines)
