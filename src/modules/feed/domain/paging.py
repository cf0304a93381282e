"""Paging contract shared by every collection.

A loader turns a page key into either a :class:`Page` or a :class:`LoadError`.
The :class:`Pager` in the application layer drives loaders and never needs to
know which collection it is paging through.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum


class LoadDirection(StrEnum):
    """Which end of a collection a load fills."""

    REFRESH = "refresh"
    APPEND = "append"
    PREPEND = "prepend"


@dataclass(frozen=True)
class LoadParams[K]:
    """Parameters for one load call. ``key=None`` means the first page."""

    key: K | None
    load_size: int


@dataclass(frozen=True)
class Page[K, T]:
    """One loaded page.

    ``next_key`` is None once the end of data has been reached; ``prev_key``
    is None for the first page.
    """

    items: Sequence[T]
    prev_key: K | None = None
    next_key: K | None = None

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class LoadError:
    """A page-level failure. No partial items are ever attached."""

    cause: BaseException

    @property
    def message(self) -> str:
        return str(self.cause) or type(self.cause).__name__


type LoadResult[K, T] = Page[K, T] | LoadError


@dataclass(frozen=True)
class PagingState[K, T]:
    """Snapshot of what a pager has loaded, used to compute refresh keys."""

    pages: Sequence[Page[K, T]] = ()
    anchor_position: int | None = None

    def closest_page_to_position(self, position: int) -> Page[K, T] | None:
        """Return the loaded page containing ``position``.

        Positions before the first item map to the first page and positions past
        the last item map to the last page.
        """
        if not self.pages:
            return None
        if position < 0:
            return self.pages[0]
        offset = 0
        for page in self.pages:
            offset += len(page.items)
            if position < offset:
                return page
        return self.pages[-1]


def int_refresh_key[T](state: PagingState[int, T]) -> int | None:
    """Refresh key for 1-based integer pages.

    Resumes at the page holding the anchor: its ``prev_key + 1``, falling back
    to ``next_key - 1``. Without an anchor the refresh starts from page one.
    """
    if state.anchor_position is None:
        return None
    page = state.closest_page_to_position(state.anchor_position)
    if page is None:
        return None
    if page.prev_key is not None:
        return page.prev_key + 1
    if page.next_key is not None:
        return page.next_key - 1
    return None


class PageLoader[K, T](ABC):
    """Loads one page of a collection at a time."""

    collection: str = "collection"

    @abstractmethod
    async def load(self, params: LoadParams[K]) -> LoadResult[K, T]:
        """Load the page identified by ``params.key``.

        Must not raise for transport or decode failures; those are returned as
        :class:`LoadError`.
        """

    @abstractmethod
    def get_refresh_key(self, state: PagingState[K, T]) -> K | None:
        """Key to reload from so a refresh resumes near the anchor."""


# ============================================
# Load states
# ============================================


@dataclass(frozen=True)
class Idle:
    """Not loading. ``end_reached`` marks the terminal no-more-items state."""

    end_reached: bool = False


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class LoadFailed:
    cause: BaseException


type LoadState = Idle | Loading | LoadFailed


@dataclass(frozen=True)
class CombinedLoadStates:
    refresh: LoadState = field(default_factory=Idle)
    append: LoadState = field(default_factory=Idle)
    prepend: LoadState = field(default_factory=Idle)

    def get(self, direction: LoadDirection) -> LoadState:
        return getattr(self, direction.value)

    @property
    def is_idle(self) -> bool:
        return not any(
            isinstance(state, Loading)
            for state in (self.refresh, self.append, self.prepend)
        )
