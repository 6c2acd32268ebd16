"""Loading the participating project list."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from pr_leaderboard.exceptions import ProjectListError
from pr_leaderboard.models import RepositoryId

logger = logging.getLogger(__name__)


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def read_project_entries(source: str, timeout: float = 30.0) -> list[dict[str, Any]]:
    """Read the raw project entries from a local JSON file or a remote JSON URL.

    Raises:
        ProjectListError: If the source cannot be read or is not a JSON array
            of objects.
    """
    try:
        if _is_remote(source):
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                response = await client.get(source)
            response.raise_for_status()
            data = response.json()
        else:
            with open(Path(source), encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, httpx.HTTPError, ValueError) as exc:
        raise ProjectListError(f"Could not read project list from {source}: {exc}") from exc

    if not isinstance(data, list) or not all(isinstance(e, dict) for e in data):
        raise ProjectListError(f"Project list at {source} must be a JSON array of objects")
    return data


async def load_projects(
    source: str,
    link_field: str = "project_link",
    timeout: float = 30.0,
) -> list[RepositoryId]:
    """Load project entries and derive a :class:`RepositoryId` for each, in order."""
    entries = await read_project_entries(source, timeout=timeout)
    repos: list[RepositoryId] = []
    for index, entry in enumerate(entries):
        link = entry.get(link_field)
        if not isinstance(link, str) or not link:
            raise ProjectListError(f"Project entry {index} has no {link_field!r}")
        repos.append(RepositoryId.from_url(link))
    logger.info("Loaded %d projects from %s", len(repos), source)
    return repos
