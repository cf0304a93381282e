"""Gateway-backed page loaders, one per collection.

All loaders share the same key arithmetic and error handling; they differ only
in which gateway method they call and how they decode the raw items.
"""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Any

from loguru import logger

from src.core.domain.exceptions import FeedError, InvalidPageRequestError
from src.core.infrastructure.logging import FeedEvents
from src.modules.feed.domain.entities import (
    FeedItem,
    MatchResultSummary,
    UpcomingMatch,
)
from src.modules.feed.domain.gateway import ContentGateway, RawPage
from src.modules.feed.domain.paging import (
    LoadError,
    LoadParams,
    LoadResult,
    Page,
    PageLoader,
    PagingState,
    int_refresh_key,
)
from src.modules.feed.infrastructure.decoder import FeedItemDecoder

STARTING_PAGE = 1


def page_keys(
    page: int, load_size: int, item_count: int, has_next: bool
) -> tuple[int | None, int | None]:
    """Compute ``(prev_key, next_key)`` for a fetched page.

    ``item_count`` is the number of decoded items. The next key requires both
    the server's ``has_next`` hint and a full page; a short or empty page is
    treated as the last one.
    """
    prev_key = None if page <= STARTING_PAGE else page - 1
    is_full_page = item_count > 0 and item_count >= load_size
    next_key = page + 1 if has_next and is_full_page else None
    return prev_key, next_key


class GatewayPageLoader[T](PageLoader[int, T]):
    """Base loader for 1-based integer pages served by the content gateway."""

    collection = "collection"

    def __init__(
        self,
        gateway: ContentGateway,
        decoder: FeedItemDecoder | None = None,
    ) -> None:
        self.gateway = gateway
        self.decoder = decoder or FeedItemDecoder()

    @abstractmethod
    async def _fetch(self, page: int, page_size: int) -> RawPage: ...

    @abstractmethod
    def _decode(self, raw_items: Sequence[Any]) -> list[T]: ...

    async def load(self, params: LoadParams[int]) -> LoadResult[int, T]:
        page = params.key if params.key is not None else STARTING_PAGE
        if page < STARTING_PAGE or params.load_size < 1:
            return LoadError(
                InvalidPageRequestError(
                    f"Invalid page request page={page} load_size={params.load_size}"
                )
            )

        try:
            raw_page = await self._fetch(page, params.load_size)
            items = self._decode(raw_page.items)
        except FeedError as exc:
            logger.warning(f"{self.collection} page {page} failed: {exc.message}")
            FeedEvents.page_load_failed(
                collection=self.collection, page=page, error=exc.error_code
            )
            return LoadError(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"{self.collection} page {page} failed unexpectedly: {exc}")
            FeedEvents.page_load_failed(
                collection=self.collection, page=page, error=type(exc).__name__
            )
            return LoadError(exc)

        prev_key, next_key = page_keys(
            page, params.load_size, len(items), raw_page.pagination.has_next
        )
        logger.debug(
            f"{self.collection} page={page} load_size={params.load_size} "
            f"raw={len(raw_page.items)} items={len(items)} next_key={next_key}"
        )
        FeedEvents.page_loaded(
            collection=self.collection,
            page=page,
            item_count=len(items),
            next_key=next_key,
        )
        return Page(items=tuple(items), prev_key=prev_key, next_key=next_key)

    def get_refresh_key(self, state: PagingState[int, T]) -> int | None:
        return int_refresh_key(state)


class HomeFeedPageLoader(GatewayPageLoader[FeedItem]):
    collection = "home_feed"

    async def _fetch(self, page: int, page_size: int) -> RawPage:
        return await self.gateway.fetch_main_feed(page, page_size)

    def _decode(self, raw_items: Sequence[Any]) -> list[FeedItem]:
        return self.decoder.decode_many(raw_items)


class UpcomingMatchesPageLoader(GatewayPageLoader[UpcomingMatch]):
    collection = "upcoming_matches"

    async def _fetch(self, page: int, page_size: int) -> RawPage:
        return await self.gateway.fetch_upcoming_matches(page, page_size)

    def _decode(self, raw_items: Sequence[Any]) -> list[UpcomingMatch]:
        return self.decoder.decode_upcoming_matches(raw_items)


class MatchResultsPageLoader(GatewayPageLoader[MatchResultSummary]):
    collection = "match_results"

    async def _fetch(self, page: int, page_size: int) -> RawPage:
        return await self.gateway.fetch_match_results(page, page_size)

    def _decode(self, raw_items: Sequence[Any]) -> list[MatchResultSummary]:
        return self.decoder.decode_match_results(raw_items)
