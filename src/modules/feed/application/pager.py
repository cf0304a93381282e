"""Pager: drives a page loader into one growing collection.

职责：
- 维护已加载页面与三个方向（refresh/append/prepend）的加载状态
- 每个方向同一时间最多一个进行中的加载，重复请求直接忽略
- 失败的加载可通过 retry() 以相同参数重新发起
- 只有 observe() 会触发预取；key_of()/get() 是纯读取
"""

import asyncio
from collections.abc import Callable, Hashable, Iterator, Sequence
from typing import Any

from loguru import logger

from src.modules.feed.domain.paging import (
    CombinedLoadStates,
    Idle,
    LoadDirection,
    LoadError,
    LoadFailed,
    Loading,
    LoadParams,
    LoadState,
    Page,
    PageLoader,
    PagingState,
)

type ItemTransform[T] = Callable[[T], T]


class Pager[K, T]:
    """Sequential pager over a single :class:`PageLoader`."""

    def __init__(
        self,
        loader: PageLoader[K, T],
        *,
        page_size: int,
        initial_load_size: int | None = None,
        prefetch_distance: int = 1,
        transforms: Sequence[ItemTransform[T]] = (),
        key_fn: Callable[[T], Hashable] | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        if prefetch_distance < 0:
            raise ValueError("prefetch_distance must not be negative")
        self._loader = loader
        self._page_size = page_size
        self._initial_load_size = initial_load_size or page_size
        self._prefetch_distance = prefetch_distance
        self._transforms = tuple(transforms)
        self._key_fn = key_fn

        self._pages: list[Page[K, T]] = []
        self._load_states = CombinedLoadStates()
        self._in_flight: dict[LoadDirection, asyncio.Task[None]] = {}
        self._failed: dict[LoadDirection, LoadParams[K]] = {}
        self._prefetches: dict[LoadDirection, asyncio.Task[None]] = {}
        self._anchor_position: int | None = None
        self._closed = False

        self.collection = FeedCollection(self)

    # -- read side ---------------------------------------------------------

    @property
    def loader(self) -> PageLoader[K, T]:
        return self._loader

    @property
    def load_state(self) -> CombinedLoadStates:
        return self._load_states

    @property
    def pages(self) -> tuple[Page[K, T], ...]:
        return tuple(self._pages)

    @property
    def item_count(self) -> int:
        return sum(len(page.items) for page in self._pages)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def items(self) -> Iterator[T]:
        for page in self._pages:
            yield from page.items

    def item_at(self, index: int) -> T | None:
        if index < 0:
            return None
        offset = index
        for page in self._pages:
            if offset < len(page.items):
                return page.items[offset]
            offset -= len(page.items)
        return None

    def key_of(self, index: int) -> Hashable | None:
        item = self.item_at(index)
        if item is None:
            return None
        return self._key_fn(item) if self._key_fn else index

    def paging_state(self) -> PagingState[K, T]:
        return PagingState(pages=tuple(self._pages), anchor_position=self._anchor_position)

    def is_loading(self, direction: LoadDirection) -> bool:
        return direction in self._in_flight

    # -- write side --------------------------------------------------------

    async def refresh(self) -> None:
        """Reload around the anchor (or from the first page) and replace everything.

        In-flight append/prepend loads are cancelled; their results are dropped.
        """
        key = self._loader.get_refresh_key(self.paging_state()) if self._pages else None
        await self._run_refresh(LoadParams(key, self._initial_load_size))

    async def load_more(self, direction: LoadDirection = LoadDirection.APPEND) -> None:
        """Load the page after (or before) what is loaded.

        No-op when the end has been reached, when nothing has been loaded yet,
        or when a load for this direction or a refresh is already running.
        """
        if direction is LoadDirection.REFRESH:
            raise ValueError("use refresh() to reload the collection")
        if self._closed or not self._pages:
            return
        if direction in self._in_flight or LoadDirection.REFRESH in self._in_flight:
            return

        key = self._edge_key(direction)
        if key is None:
            self._set_state(direction, Idle(end_reached=True))
            return
        await self._run(direction, LoadParams(key, self._page_size))

    async def retry(self) -> None:
        """Re-issue failed loads with their original parameters.

        A failed refresh is retried on its own: once it commits, failures
        recorded against the previous pages no longer apply.
        """
        if self._closed:
            return
        refresh_params = self._failed.get(LoadDirection.REFRESH)
        if refresh_params is not None:
            await self._run_refresh(refresh_params)
            return

        for direction in (LoadDirection.APPEND, LoadDirection.PREPEND):
            params = self._failed.get(direction)
            if self._closed or params is None:
                continue
            if direction in self._in_flight or LoadDirection.REFRESH in self._in_flight:
                continue
            await self._run(direction, params)

    def observe(self, index: int) -> None:
        """Mark ``index`` as visible. The only call that may schedule prefetching."""
        if self._closed or not self._pages:
            return
        count = self.item_count
        self._anchor_position = max(0, min(index, count - 1))

        if index >= count - self._prefetch_distance:
            self._schedule_prefetch(LoadDirection.APPEND)
        if index < self._prefetch_distance:
            self._schedule_prefetch(LoadDirection.PREPEND)

    async def close(self) -> None:
        """Cancel every in-flight load. Nothing partial is committed."""
        self._closed = True
        tasks = [*self._in_flight.values(), *self._prefetches.values()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._in_flight.clear()
        self._prefetches.clear()

    # -- internals ---------------------------------------------------------

    def _edge_key(self, direction: LoadDirection) -> K | None:
        if direction is LoadDirection.APPEND:
            return self._pages[-1].next_key
        return self._pages[0].prev_key

    def _schedule_prefetch(self, direction: LoadDirection) -> None:
        if direction in self._prefetches or direction in self._in_flight:
            return
        if LoadDirection.REFRESH in self._in_flight:
            return
        if isinstance(self._load_states.get(direction), LoadFailed):
            return
        if self._edge_key(direction) is None:
            return
        task = asyncio.create_task(self.load_more(direction))
        self._prefetches[direction] = task
        task.add_done_callback(lambda done: self._prefetch_done(direction, done))

    def _prefetch_done(self, direction: LoadDirection, task: asyncio.Task[None]) -> None:
        if self._prefetches.get(direction) is task:
            del self._prefetches[direction]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"{direction} prefetch failed: {exc}")

    async def _run_refresh(self, params: LoadParams[K]) -> None:
        if self._closed or LoadDirection.REFRESH in self._in_flight:
            return
        for direction in (LoadDirection.APPEND, LoadDirection.PREPEND):
            task = self._in_flight.get(direction)
            if task is not None:
                task.cancel()
        await self._run(LoadDirection.REFRESH, params)

    async def _run(self, direction: LoadDirection, params: LoadParams[K]) -> None:
        task = asyncio.create_task(self._load(direction, params))
        self._in_flight[direction] = task
        task.add_done_callback(lambda done: self._forget(direction, done))
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug(f"{direction} load for key={params.key} was cancelled")

    def _forget(self, direction: LoadDirection, task: asyncio.Task[None]) -> None:
        if self._in_flight.get(direction) is task:
            del self._in_flight[direction]

    async def _load(self, direction: LoadDirection, params: LoadParams[K]) -> None:
        self._set_state(direction, Loading())
        try:
            result = await self._loader.load(params)
        except asyncio.CancelledError:
            self._set_state(direction, Idle())
            raise
        except Exception as exc:
            # loaders should return LoadError; keep the pager retryable anyway
            self._failed[direction] = params
            self._set_state(direction, LoadFailed(exc))
            raise

        if isinstance(result, LoadError):
            self._failed[direction] = params
            self._set_state(direction, LoadFailed(result.cause))
            return

        self._failed.pop(direction, None)
        self._commit(direction, self._apply_transforms(result))

    def _apply_transforms(self, page: Page[K, T]) -> Page[K, T]:
        if not self._transforms:
            return page
        items = []
        for item in page.items:
            for transform in self._transforms:
                item = transform(item)
            items.append(item)
        return Page(items=tuple(items), prev_key=page.prev_key, next_key=page.next_key)

    def _commit(self, direction: LoadDirection, page: Page[K, T]) -> None:
        if direction is LoadDirection.REFRESH:
            self._pages = [page]
            self._failed.clear()
            if self._anchor_position is not None:
                self._anchor_position = min(self._anchor_position, max(len(page) - 1, 0))
            self._load_states = CombinedLoadStates(
                refresh=Idle(),
                append=Idle(end_reached=page.next_key is None),
                prepend=Idle(end_reached=page.prev_key is None),
            )
            return

        if direction is LoadDirection.APPEND:
            self._pages.append(page)
            self._set_state(direction, Idle(end_reached=page.next_key is None))
        else:
            self._pages.insert(0, page)
            if self._anchor_position is not None:
                self._anchor_position += len(page)
            self._set_state(direction, Idle(end_reached=page.prev_key is None))

    def _set_state(self, direction: LoadDirection, state: LoadState) -> None:
        self._load_states = CombinedLoadStates(
            refresh=state if direction is LoadDirection.REFRESH else self._load_states.refresh,
            append=state if direction is LoadDirection.APPEND else self._load_states.append,
            prepend=state if direction is LoadDirection.PREPEND else self._load_states.prepend,
        )


class FeedCollection[T]:
    """Read-only view of a pager's items for the list view.

    ``get`` and ``key_of`` never trigger loading; ``observe`` declares that an
    index is being shown and is the only demand signal.
    """

    def __init__(self, pager: "Pager[Any, T]") -> None:
        self._pager = pager

    @property
    def item_count(self) -> int:
        return self._pager.item_count

    @property
    def load_state(self) -> CombinedLoadStates:
        return self._pager.load_state

    def get(self, index: int) -> T | None:
        return self._pager.item_at(index)

    def key_of(self, index: int) -> Hashable | None:
        return self._pager.key_of(index)

    def observe(self, index: int) -> T | None:
        self._pager.observe(index)
        return self._pager.item_at(index)

    async def retry(self) -> None:
        await self._pager.retry()

    def snapshot(self) -> tuple[T, ...]:
        return tuple(self._pager.items())

    def __len__(self) -> int:
        return self._pager.item_count

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())
