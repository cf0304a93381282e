"""Feed coordinator.

Owns the pagers of one feed screen and the preview hand-off between them:

- home feed pager, whose transform step records carousel previews
- upcoming matches pager, built on first use from the recorded preview
- match results pager

Tearing the coordinator down cancels every in-flight load.
"""

from __future__ import annotations

from types import TracebackType

from loguru import logger

from src.core.config import Settings, settings as default_settings
from src.modules.feed.application.loaders import (
    HomeFeedPageLoader,
    MatchResultsPageLoader,
)
from src.modules.feed.application.pager import Pager
from src.modules.feed.application.preview_cache import PreviewCache
from src.modules.feed.application.preview_loader import PreviewSeededPageLoader
from src.modules.feed.domain.entities import (
    FeedItem,
    MatchResultSummary,
    UpcomingMatch,
)
from src.modules.feed.domain.gateway import ContentGateway
from src.modules.feed.infrastructure.decoder import FeedItemDecoder
from src.modules.feed.infrastructure.gateway import HttpContentGateway


class FeedCoordinator:
    """Builds and owns the pagers of the feed screens."""

    def __init__(
        self,
        gateway: ContentGateway,
        config: Settings | None = None,
        decoder: FeedItemDecoder | None = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or default_settings
        self.decoder = decoder or FeedItemDecoder()
        self.preview_cache = PreviewCache()

        self.home_feed: Pager[int, FeedItem] = Pager(
            HomeFeedPageLoader(gateway, self.decoder),
            page_size=self.config.HOME_FEED_PAGE_SIZE,
            initial_load_size=self.config.HOME_FEED_INITIAL_LOAD_SIZE,
            prefetch_distance=self.config.HOME_FEED_PREFETCH_DISTANCE,
            transforms=(self.preview_cache.capture,),
            key_fn=feed_item_key,
        )
        self.match_results: Pager[int, MatchResultSummary] = Pager(
            MatchResultsPageLoader(gateway, self.decoder),
            page_size=self.config.RESULTS_PAGE_SIZE,
            prefetch_distance=self.config.RESULTS_PREFETCH_DISTANCE,
            key_fn=lambda result: f"match_result-{result.match_id}-{result.match_type}",
        )
        self._upcoming_matches: Pager[int, UpcomingMatch] | None = None
        self._closed = False

    @property
    def upcoming_matches(self) -> Pager[int, UpcomingMatch]:
        """Upcoming matches pager, seeded with the preview seen so far.

        The preview cache is read exactly once, here, on first access. If no
        carousel has been seen yet the pager falls back to plain pagination.
        Raises ``RuntimeError`` once the coordinator is closed.
        """
        if self._closed:
            raise RuntimeError("Feed coordinator is closed")
        if self._upcoming_matches is None:
            preview = self.preview_cache.read()
            if self.preview_cache.version == 0:
                logger.info("No upcoming preview captured yet, paging without seed")
            elif not preview:
                logger.info("Latest carousel carried no previews, paging without seed")
            self._upcoming_matches = Pager(
                PreviewSeededPageLoader(self.gateway, preview, self.decoder),
                page_size=self.config.UPCOMING_PAGE_SIZE,
                prefetch_distance=self.config.UPCOMING_PREFETCH_DISTANCE,
                key_fn=lambda match: f"upcoming_match-{match.match_id}",
            )
        return self._upcoming_matches

    def pagers(self) -> list[Pager]:
        pagers: list[Pager] = [self.home_feed, self.match_results]
        if self._upcoming_matches is not None:
            pagers.append(self._upcoming_matches)
        return pagers

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for pager in self.pagers():
            await pager.close()
        await self.gateway.aclose()
        logger.debug("Feed coordinator closed")

    async def __aenter__(self) -> FeedCoordinator:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


def feed_item_key(item: FeedItem) -> str:
    """Stable list key for a feed item."""
    return f"{item.kind}-{item.id}"


def build_feed_coordinator(config: Settings | None = None) -> FeedCoordinator:
    """Composition helper wiring the coordinator to the HTTP gateway."""
    config = config or default_settings
    gateway = HttpContentGateway(
        base_url=config.api_base_url,
        timeout_sec=config.API_TIMEOUT_SEC,
        retry_attempts=config.API_RETRY_ATTEMPTS,
    )
    return FeedCoordinator(gateway, config)
