"""分页器单元测试。

测试覆盖：
- refresh / load_more / retry 的状态流转
- 同方向并发加载去重
- 刷新在失败时保留旧集合，成功时整体替换
- 只有 observe 会触发预取
- close 取消进行中的加载
"""

import asyncio

import pytest
from loguru import logger

from src.core.domain.exceptions import TransportError
from src.modules.feed.application.loaders import HomeFeedPageLoader
from src.modules.feed.application.pager import Pager
from src.modules.feed.domain.paging import Idle, LoadDirection, LoadFailed, LoadParams
from tests.factories import FakeGateway, news_page

# 使用 anyio 作为异步测试后端
pytestmark = pytest.mark.anyio


def make_pager(gateway: FakeGateway, *, page_size: int = 3, **kwargs) -> Pager:
    return Pager(HomeFeedPageLoader(gateway), page_size=page_size, **kwargs)


def ids(pager: Pager) -> list[str]:
    return [item.id for item in pager.collection]


class RaisingLoader(HomeFeedPageLoader):
    """Loader that raises instead of returning LoadError once broken."""

    broken = False

    async def load(self, params: LoadParams[int]):
        if self.broken:
            raise RuntimeError("loader bug")
        return await super().load(params)


async def settle(rounds: int = 20) -> None:
    """让已调度的任务跑完。"""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ============================================
# 基本加载测试
# ============================================


class TestRefreshAndAppend:
    """refresh 与 load_more。"""

    async def test_refresh_loads_first_page(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        pager = make_pager(fake_gateway)

        await pager.refresh()

        assert ids(pager) == ["n1-0", "n1-1", "n1-2"]
        assert pager.load_state.refresh == Idle()
        assert pager.load_state.append == Idle(end_reached=False)
        assert pager.load_state.prepend == Idle(end_reached=True)
        assert fake_gateway.calls_for("main_feed") == [(1, 3)]

    async def test_initial_load_size_only_for_refresh(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 2))
        fake_gateway.set_page("main_feed", 2, news_page(2, 5))
        pager = make_pager(fake_gateway, page_size=5, initial_load_size=2)

        await pager.refresh()
        await pager.load_more()

        assert fake_gateway.calls_for("main_feed") == [(1, 2), (2, 5)]
        assert pager.item_count == 7

    async def test_load_more_before_refresh_is_noop(self, fake_gateway: FakeGateway):
        pager = make_pager(fake_gateway)

        await pager.load_more()

        assert fake_gateway.calls == []
        assert pager.item_count == 0

    async def test_load_more_rejects_refresh_direction(self, fake_gateway: FakeGateway):
        pager = make_pager(fake_gateway)

        with pytest.raises(ValueError):
            await pager.load_more(LoadDirection.REFRESH)

    def test_invalid_page_size(self, fake_gateway: FakeGateway):
        with pytest.raises(ValueError):
            make_pager(fake_gateway, page_size=0)

    async def test_pages_append_in_order_until_end(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        fake_gateway.set_page("main_feed", 3, news_page(3, 2, has_next=False))
        pager = make_pager(fake_gateway)

        await pager.refresh()
        await pager.load_more()
        await pager.load_more()

        assert pager.item_count == 8
        assert ids(pager)[:4] == ["n1-0", "n1-1", "n1-2", "n2-0"]
        assert ids(pager)[-1] == "n3-1"
        assert pager.load_state.append == Idle(end_reached=True)

        await pager.load_more()

        assert len(fake_gateway.calls_for("main_feed")) == 3
        assert pager.item_count == 8

    async def test_prepend_from_a_mid_collection_refresh(self, fake_gateway: FakeGateway):
        for page in (1, 2, 3):
            fake_gateway.set_page("main_feed", page, news_page(page, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()
        await pager.load_more()
        await pager.load_more()

        pager.observe(4)
        await pager.refresh()

        assert fake_gateway.calls_for("main_feed")[-1] == (2, 3)
        assert ids(pager) == ["n2-0", "n2-1", "n2-2"]
        assert pager.load_state.prepend == Idle(end_reached=False)

        await pager.load_more(LoadDirection.PREPEND)

        assert ids(pager)[:3] == ["n1-0", "n1-1", "n1-2"]
        assert pager.item_count == 6
        assert pager.load_state.prepend == Idle(end_reached=True)
        assert pager.paging_state().anchor_position == 5


# ============================================
# 失败与重试测试
# ============================================


class TestFailureAndRetry:
    """失败状态与重试。"""

    async def test_append_failure_then_retry(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page(
            "main_feed", 2, TransportError("Timeout"), news_page(2, 3)
        )
        pager = make_pager(fake_gateway)
        await pager.refresh()

        await pager.load_more()

        state = pager.load_state.append
        assert isinstance(state, LoadFailed)
        assert isinstance(state.cause, TransportError)
        assert pager.item_count == 3

        await pager.collection.retry()

        assert pager.item_count == 6
        assert pager.load_state.append == Idle(end_reached=False)
        assert fake_gateway.calls_for("main_feed") == [(1, 3), (2, 3), (2, 3)]

    async def test_failed_refresh_keeps_previous_items(self, fake_gateway: FakeGateway):
        fake_gateway.set_page(
            "main_feed",
            1,
            news_page(1, 3),
            TransportError("HTTP 503", status_code=503),
            news_page(1, 3),
        )
        pager = make_pager(fake_gateway)
        await pager.refresh()

        await pager.refresh()

        assert isinstance(pager.load_state.refresh, LoadFailed)
        assert ids(pager) == ["n1-0", "n1-1", "n1-2"]

        await pager.retry()

        assert pager.load_state.refresh == Idle()
        assert pager.item_count == 3

    async def test_successful_refresh_replaces_everything(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()
        await pager.load_more()
        assert pager.item_count == 6

        await pager.refresh()

        assert len(pager.pages) == 1
        assert ids(pager) == ["n1-0", "n1-1", "n1-2"]

    async def test_retried_refresh_drops_stale_append_failure(
        self, fake_gateway: FakeGateway
    ):
        fake_gateway.set_page(
            "main_feed", 1, news_page(1, 3), TransportError("Timeout"), news_page(1, 3)
        )
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        fake_gateway.set_page("main_feed", 3, TransportError("Timeout"), news_page(3, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()
        await pager.load_more()
        await pager.refresh()
        await pager.load_more()
        assert isinstance(pager.load_state.refresh, LoadFailed)
        assert isinstance(pager.load_state.append, LoadFailed)

        await pager.retry()

        assert ids(pager) == ["n1-0", "n1-1", "n1-2"]
        assert pager.load_state.refresh == Idle()
        assert pager.load_state.append == Idle(end_reached=False)
        assert fake_gateway.calls_for("main_feed").count((3, 3)) == 1

        await pager.retry()

        assert len(fake_gateway.calls) == 5

    async def test_retried_refresh_cancels_in_flight_append(
        self, fake_gateway: FakeGateway
    ):
        fake_gateway.set_page(
            "main_feed", 1, news_page(1, 3), TransportError("Timeout"), news_page(1, 3)
        )
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()
        await pager.refresh()
        assert isinstance(pager.load_state.refresh, LoadFailed)

        gate = asyncio.Event()
        fake_gateway.gate = gate
        append = asyncio.create_task(pager.load_more())
        await settle()
        assert pager.is_loading(LoadDirection.APPEND)

        fake_gateway.gate = None
        await pager.retry()
        gate.set()
        await append
        await settle()

        assert ids(pager) == ["n1-0", "n1-1", "n1-2"]
        assert pager.load_state.refresh == Idle()

    async def test_retry_without_failures_is_noop(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        await pager.retry()

        assert len(fake_gateway.calls) == 1


# ============================================
# 并发测试
# ============================================


class TestConcurrency:
    """同方向最多一个进行中的加载。"""

    async def test_duplicate_appends_issue_one_request(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        fake_gateway.gate = asyncio.Event()
        first = asyncio.create_task(pager.load_more())
        second = asyncio.create_task(pager.load_more())
        await settle()

        assert pager.is_loading(LoadDirection.APPEND)
        assert fake_gateway.calls_for("main_feed") == [(1, 3), (2, 3)]

        fake_gateway.gate.set()
        await asyncio.gather(first, second)

        assert pager.item_count == 6
        assert fake_gateway.calls_for("main_feed") == [(1, 3), (2, 3)]

    async def test_refresh_cancels_in_flight_append(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        gate = asyncio.Event()
        fake_gateway.gate = gate
        append = asyncio.create_task(pager.load_more())
        await settle()
        assert pager.is_loading(LoadDirection.APPEND)

        fake_gateway.gate = None
        await pager.refresh()
        gate.set()
        await append
        await settle()

        assert ids(pager) == ["n1-0", "n1-1", "n1-2"]
        assert not pager.is_loading(LoadDirection.APPEND)
        assert pager.load_state.append == Idle(end_reached=False)

    async def test_close_cancels_without_committing(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.gate = asyncio.Event()
        pager = make_pager(fake_gateway)

        refresh = asyncio.create_task(pager.refresh())
        await settle()
        await pager.close()
        await refresh

        assert pager.is_closed
        assert pager.item_count == 0
        assert pager.load_state.is_idle

        fake_gateway.gate = None
        await pager.refresh()

        assert len(fake_gateway.calls) == 1
        assert pager.item_count == 0


# ============================================
# 预取测试
# ============================================


class TestObserveAndPrefetch:
    """只有 observe 触发加载。"""

    async def test_get_and_key_of_never_load(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        pager = make_pager(fake_gateway, key_fn=lambda item: item.id)
        await pager.refresh()

        assert pager.collection.get(2).id == "n1-2"
        assert pager.collection.key_of(2) == "n1-2"
        assert pager.collection.key_of(99) is None
        assert pager.collection.get(-1) is None
        await settle()

        assert len(fake_gateway.calls) == 1

    async def test_key_of_defaults_to_index(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        assert pager.collection.key_of(1) == 1

    async def test_observe_near_end_prefetches_once(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, news_page(2, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        item = pager.collection.observe(2)
        pager.collection.observe(2)
        await settle()

        assert item is not None and item.id == "n1-2"
        assert pager.item_count == 6
        assert fake_gateway.calls_for("main_feed") == [(1, 3), (2, 3)]

    async def test_observe_far_from_edges_does_not_load(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 6))
        pager = make_pager(fake_gateway, page_size=6)
        await pager.refresh()

        pager.observe(3)
        await settle()

        assert len(fake_gateway.calls) == 1

    async def test_no_prefetch_after_failure(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, TransportError("Timeout"))
        pager = make_pager(fake_gateway)
        await pager.refresh()
        await pager.load_more()

        pager.observe(2)
        await settle()

        assert fake_gateway.calls_for("main_feed") == [(1, 3), (2, 3)]
        assert isinstance(pager.load_state.append, LoadFailed)

    async def test_prefetch_error_from_raising_loader_is_reported(
        self, fake_gateway: FakeGateway
    ):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        loader = RaisingLoader(fake_gateway)
        pager = Pager(loader, page_size=3)
        await pager.refresh()
        loader.broken = True

        messages: list[str] = []
        handler_id = logger.add(messages.append, level="ERROR", format="{message}")
        try:
            pager.observe(2)
            await settle()
        finally:
            logger.remove(handler_id)

        state = pager.load_state.append
        assert isinstance(state, LoadFailed)
        assert isinstance(state.cause, RuntimeError)
        assert any("append prefetch failed" in m for m in messages)
        assert not pager.is_loading(LoadDirection.APPEND)

    async def test_no_prefetch_at_end_of_data(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3, has_next=False))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        pager.observe(2)
        await settle()

        assert len(fake_gateway.calls) == 1


# ============================================
# 变换与集合视图测试
# ============================================


class TestTransformsAndCollection:
    """变换步骤与只读集合视图。"""

    async def test_transforms_see_every_committed_item(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        fake_gateway.set_page("main_feed", 2, TransportError("Timeout"))
        seen: list[str] = []

        def record(item):
            seen.append(item.id)
            return item

        pager = make_pager(fake_gateway, transforms=(record,))
        await pager.refresh()
        await pager.load_more()

        assert seen == ["n1-0", "n1-1", "n1-2"]

    async def test_collection_view(self, fake_gateway: FakeGateway):
        fake_gateway.set_page("main_feed", 1, news_page(1, 3))
        pager = make_pager(fake_gateway)
        await pager.refresh()

        collection = pager.collection

        assert len(collection) == collection.item_count == 3
        assert [item.id for item in collection.snapshot()] == ids(pager)
        assert collection.load_state is pager.load_state
