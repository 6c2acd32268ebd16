"""Example: generate a leaderboard for two repositories from Python."""

from __future__ import annotations

import asyncio
import os

from pr_leaderboard import RepositoryId, generate_leaderboard, load_config
from pr_leaderboard.formatter import write_leaderboard


async def main() -> None:
    config = load_config()
    repos = [
        RepositoryId.from_url("https://github.com/octo-org/widgets"),
        RepositoryId.from_url("https://github.com/octo-org/gadgets"),
    ]
    leaderboard, summary = await generate_leaderboard(
        token=os.environ["GITHUB_TOKEN"],
        config=config,
        repos=repos,
    )
    print(f"Scanned {summary.repos_scanned}/{summary.repos_total} repositories")
    for rank, entry in enumerate(leaderboard.entries[:5], start=1):
        print(f"{rank}. {entry.login}: {entry.score} points ({len(entry.pr_urls)} PRs)")

    write_leaderboard(leaderboard, config.output.path)


if __name__ == "__main__":
    asyncio.run(main())
