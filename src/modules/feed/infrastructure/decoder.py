"""Item decoder.

Turns raw, type-tagged API entries into domain objects. A bad entry never fails
the batch: it is reported as :class:`Unrecognized`, logged, and skipped by the
``*_many`` helpers.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel

from src.core.infrastructure.logging import FeedEvents
from src.modules.feed.domain.entities import (
    FeedItem,
    MatchResultSummary,
    UpcomingMatch,
)
from src.modules.feed.domain.gateway import RawFeedItem
from src.modules.feed.infrastructure.dto import (
    BannerAdDTO,
    LiveMatchDTO,
    MatchResultDTO,
    NewsDTO,
    UpcomingMatchDTO,
    UpcomingMatchesCarouselDTO,
    VideoDTO,
)
from src.modules.feed.infrastructure.mappers import (
    banner_ad_to_domain,
    carousel_to_domain,
    live_match_to_domain,
    match_result_summary_to_domain,
    match_result_to_domain,
    news_to_domain,
    upcoming_match_to_domain,
    video_to_domain,
)

type FeedItemConverter = Callable[[Any, str, int], FeedItem]

FEED_ITEM_CONVERTERS: dict[str, tuple[type[BaseModel], FeedItemConverter]] = {
    "live_match": (LiveMatchDTO, live_match_to_domain),
    "upcoming_matches_carousel": (UpcomingMatchesCarouselDTO, carousel_to_domain),
    "news_article": (NewsDTO, news_to_domain),
    "video_highlight": (VideoDTO, video_to_domain),
    "match_result": (MatchResultDTO, match_result_to_domain),
    "banner_ad": (BannerAdDTO, banner_ad_to_domain),
}


@dataclass(frozen=True)
class Unrecognized:
    """A raw entry that could not be mapped to a domain object."""

    item_type: str | None
    item_id: str | None
    reason: str


class FeedItemDecoder:
    """Decode raw API entries into domain objects."""

    def decode(self, raw: RawFeedItem | Mapping[str, Any]) -> FeedItem | Unrecognized:
        """Decode one home feed entry. Never raises."""
        try:
            envelope = (
                raw if isinstance(raw, RawFeedItem) else RawFeedItem.model_validate(raw)
            )
        except (ValueError, TypeError) as exc:
            return self._unrecognized(
                _peek(raw, "type"), _peek(raw, "id"), f"invalid envelope: {exc}"
            )

        entry = FEED_ITEM_CONVERTERS.get(envelope.type)
        if entry is None:
            return self._unrecognized(
                envelope.type, envelope.id, f"unknown type '{envelope.type}'"
            )

        schema, convert = entry
        try:
            payload = schema.model_validate(envelope.payload)
            item = convert(payload, envelope.id, envelope.timestamp)
        except (ValueError, TypeError) as exc:
            return self._unrecognized(envelope.type, envelope.id, str(exc))

        logger.debug(f"Decoded feed item {envelope.id} as {type(item).__name__}")
        return item

    def decode_many(
        self, raws: Iterable[RawFeedItem | Mapping[str, Any]]
    ) -> list[FeedItem]:
        """Decode a page of entries, dropping unrecognized ones, order preserved."""
        decoded = (self.decode(raw) for raw in raws)
        return [item for item in decoded if not isinstance(item, Unrecognized)]

    def decode_upcoming_match(self, raw: Any) -> UpcomingMatch | Unrecognized:
        try:
            return upcoming_match_to_domain(UpcomingMatchDTO.model_validate(raw))
        except (ValueError, TypeError) as exc:
            return self._unrecognized(
                "upcoming_match", _peek(raw, "matchId"), str(exc)
            )

    def decode_upcoming_matches(self, raws: Iterable[Any]) -> list[UpcomingMatch]:
        decoded = (self.decode_upcoming_match(raw) for raw in raws)
        return [item for item in decoded if not isinstance(item, Unrecognized)]

    def decode_match_result(self, raw: Any) -> MatchResultSummary | Unrecognized:
        try:
            return match_result_summary_to_domain(MatchResultDTO.model_validate(raw))
        except (ValueError, TypeError) as exc:
            return self._unrecognized("match_result", _peek(raw, "matchId"), str(exc))

    def decode_match_results(self, raws: Iterable[Any]) -> list[MatchResultSummary]:
        decoded = (self.decode_match_result(raw) for raw in raws)
        return [item for item in decoded if not isinstance(item, Unrecognized)]

    @staticmethod
    def _unrecognized(
        item_type: str | None, item_id: str | None, reason: str
    ) -> Unrecognized:
        logger.warning(
            f"Skipping unrecognized item type={item_type!r} id={item_id!r}: {reason}"
        )
        FeedEvents.item_unrecognized(item_type=item_type, item_id=item_id, reason=reason)
        return Unrecognized(item_type=item_type, item_id=item_id, reason=reason)


def _peek(raw: Any, key: str) -> str | None:
    if isinstance(raw, Mapping):
        value = raw.get(key)
        return None if value is None else str(value)
    return None
