"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（不依赖外部服务，远端 API 由 FakeGateway 或 httpx.MockTransport 替代）

使用方法：
    # 运行所有测试
    uv run pytest

    # 只运行分页相关测试
    uv run pytest tests/unit/test_pager.py

    # 运行带覆盖率
    uv run pytest --cov=src --cov-report=html
"""

import pytest

from src.core.config import Settings
from src.modules.feed.infrastructure.decoder import FeedItemDecoder
from tests.factories import FakeGateway

# ============================================
# 配置 Fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    """分页器基于 asyncio 任务实现，只在 asyncio 后端上运行。"""
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """测试环境配置。"""
    return Settings(
        ENVIRONMENT="local",
        API_BASE_URL="http://content.test/api",
        API_RETRY_ATTEMPTS=1,
        HOME_FEED_PAGE_SIZE=50,
        HOME_FEED_INITIAL_LOAD_SIZE=18,
        UPCOMING_PAGE_SIZE=10,
        RESULTS_PAGE_SIZE=5,
    )


# ============================================
# Feed Fixtures
# ============================================


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """可编排响应的内容网关。"""
    return FakeGateway()


@pytest.fixture
def decoder() -> FeedItemDecoder:
    return FeedItemDecoder()
