"""Upcoming matches loader seeded with the home feed carousel preview."""

from collections.abc import Iterable, Sequence

from loguru import logger

from src.core.infrastructure.logging import FeedEvents
from src.modules.feed.application.loaders import (
    STARTING_PAGE,
    UpcomingMatchesPageLoader,
)
from src.modules.feed.domain.entities import UpcomingMatch
from src.modules.feed.domain.gateway import ContentGateway
from src.modules.feed.domain.paging import LoadError, LoadParams, LoadResult, Page
from src.modules.feed.infrastructure.decoder import FeedItemDecoder


def merge_preview(
    preview: Iterable[UpcomingMatch], fetched: Sequence[UpcomingMatch]
) -> list[UpcomingMatch]:
    """Merge preview matches ahead of fetched ones, deduplicated by ``match_id``.

    A fetched copy always wins over a preview copy of the same match, and keeps
    its position in the fetched order.
    """
    fetched_ids = {match.match_id for match in fetched}
    seen: set[int] = set()
    head: list[UpcomingMatch] = []
    for match in preview:
        if match.match_id in fetched_ids or match.match_id in seen:
            continue
        seen.add(match.match_id)
        head.append(match)
    return head + list(fetched)


class PreviewSeededPageLoader(UpcomingMatchesPageLoader):
    """Upcoming matches loader whose first page starts from a preview.

    The preview is merged into the first successful page only. A failed first
    page fails the load even if the preview alone could be shown.
    """

    def __init__(
        self,
        gateway: ContentGateway,
        preview: Iterable[UpcomingMatch] = (),
        decoder: FeedItemDecoder | None = None,
    ) -> None:
        super().__init__(gateway, decoder)
        self._preview: tuple[UpcomingMatch, ...] = tuple(preview)

    @property
    def preview(self) -> tuple[UpcomingMatch, ...]:
        return self._preview

    async def load(self, params: LoadParams[int]) -> LoadResult[int, UpcomingMatch]:
        is_first_page = params.key is None or params.key == STARTING_PAGE
        if not is_first_page or not self._preview:
            return await super().load(params)

        result = await super().load(LoadParams(STARTING_PAGE, params.load_size))
        if isinstance(result, LoadError):
            return result

        merged = merge_preview(self._preview, result.items)
        logger.debug(
            f"Merged {len(self._preview)} preview matches with "
            f"{len(result.items)} fetched into {len(merged)}"
        )
        FeedEvents.preview_merged(
            preview_count=len(self._preview),
            fetched_count=len(result.items),
            merged_count=len(merged),
        )
        self._preview = ()
        return Page(items=tuple(merged), prev_key=None, next_key=result.next_key)
