#!/usr/bin/env python
"""Page through the content API and print what the feed engine assembles.

Loads the home feed, then opens the upcoming matches list seeded with the
carousel preview the home feed surfaced.

用法:
    uv run python scripts/dump_feed.py [--pages 2] [--base-url http://localhost:3000/api/]
"""

import argparse
import asyncio
import sys
from pathlib import Path


def _ensure_project_root_on_path() -> None:
    """确保项目根目录在 Python 路径中，便于直接运行脚本。"""
    project_root = Path(__file__).parent.parent
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_path()


async def dump_feed(pages: int, base_url: str | None = None) -> None:
    from loguru import logger

    from src.core.config import Settings
    from src.core.infrastructure.logging import setup_logging
    from src.modules.feed.application.coordinator import build_feed_coordinator
    from src.modules.feed.domain.entities import feed_item_headline
    from src.modules.feed.domain.paging import LoadFailed

    setup_logging()
    config = Settings(API_BASE_URL=base_url) if base_url else Settings()

    async with build_feed_coordinator(config) as coordinator:
        home = coordinator.home_feed
        await home.refresh()
        for _ in range(pages - 1):
            await home.load_more()

        if isinstance(home.load_state.refresh, LoadFailed):
            logger.error(f"Home feed failed: {home.load_state.refresh.cause}")
            return

        for index, item in enumerate(home.collection):
            print(f"{index:>3} {feed_item_headline(item)}")
        logger.info(
            f"Home feed: {home.item_count} items, append state {home.load_state.append}"
        )

        upcoming = coordinator.upcoming_matches
        await upcoming.refresh()
        for match in upcoming.collection:
            print(f"  #{match.match_id} {match.title} @ {match.venue}")
        logger.info(
            f"Upcoming matches: {upcoming.item_count} items, "
            f"append state {upcoming.load_state.append}"
        )


def main():
    parser = argparse.ArgumentParser(description="Dump the assembled feed")
    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Number of home feed pages to load (default 1)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Content API base URL (default from settings)",
    )

    args = parser.parse_args()
    asyncio.run(dump_feed(max(args.pages, 1), args.base_url))


if __name__ == "__main__":
    main()
