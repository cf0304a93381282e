"""Hand-off of the upcoming matches preview from the home feed.

The home feed pager writes the carousel preview here while its items pass
through the transform step; the feed coordinator reads it once, when it builds
the upcoming matches pager. The two pagers share nothing else.
"""

import threading
from collections.abc import Iterable

from loguru import logger

from src.core.infrastructure.logging import FeedEvents
from src.modules.feed.domain.entities import (
    FeedItem,
    UpcomingMatch,
    UpcomingMatchesCarousel,
)


class PreviewCache:
    """Single-value holder for the latest carousel preview.

    Every write overwrites the previous preview. Reads never block writers for
    longer than a tuple copy.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._matches: tuple[UpcomingMatch, ...] = ()
        self._version = 0

    @property
    def version(self) -> int:
        """Number of writes so far; 0 means no carousel has been seen."""
        with self._lock:
            return self._version

    def publish(self, matches: Iterable[UpcomingMatch]) -> None:
        snapshot = tuple(matches)
        with self._lock:
            self._matches = snapshot
            self._version += 1

    def read(self) -> tuple[UpcomingMatch, ...]:
        """Return the latest preview, empty if no carousel has been seen."""
        with self._lock:
            return self._matches

    def capture(self, item: FeedItem) -> FeedItem:
        """Transform step for the home feed: record carousel previews.

        Returns the item unchanged.
        """
        if isinstance(item, UpcomingMatchesCarousel):
            self.publish(item.matches)
            logger.debug(
                f"Captured {len(item.matches)} upcoming match previews from {item.id}"
            )
            FeedEvents.preview_captured(
                carousel_id=item.id,
                preview_count=len(item.matches),
                total_count=item.total_count,
            )
        return item
