"""Logging configuration with structlog integration.

Two logging channels are used:
1. loguru: operational and debug logs
2. structlog: structured business events for paging activity
"""

import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """配置 structlog 处理器链。"""
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """配置 loguru。"""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )


def _get_log_level_number(level: str) -> int:
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# Feed business events
# ============================================================================


class FeedEvents:
    """Structured event helpers for the paging engine.

    Usage:
        from src.core.infrastructure.logging import FeedEvents

        FeedEvents.page_loaded(collection="home_feed", page=1, item_count=18)
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def page_loaded(
        cls,
        collection: str,
        page: int,
        item_count: int,
        next_key: int | None = None,
        **extra: Any,
    ) -> None:
        """记录分页加载成功事件。"""
        cls._log.info(
            "page_loaded",
            event_type="paging",
            collection=collection,
            page=page,
            item_count=item_count,
            next_key=next_key,
            end_reached=next_key is None,
            **extra,
        )

    @classmethod
    def page_load_failed(
        cls,
        collection: str,
        page: int,
        error: str,
        **extra: Any,
    ) -> None:
        """记录分页加载失败事件。"""
        cls._log.warning(
            "page_load_failed",
            event_type="paging_error",
            collection=collection,
            page=page,
            error=error,
            **extra,
        )

    @classmethod
    def item_unrecognized(
        cls,
        item_type: str | None,
        item_id: str | None,
        reason: str,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "feed_item_unrecognized",
            event_type="decode",
            item_type=item_type,
            item_id=item_id,
            reason=reason,
            **extra,
        )

    @classmethod
    def preview_captured(
        cls,
        carousel_id: str,
        preview_count: int,
        total_count: int,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "upcoming_preview_captured",
            event_type="preview",
            carousel_id=carousel_id,
            preview_count=preview_count,
            total_count=total_count,
            **extra,
        )

    @classmethod
    def preview_merged(
        cls,
        preview_count: int,
        fetched_count: int,
        merged_count: int,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "upcoming_preview_merged",
            event_type="preview",
            preview_count=preview_count,
            fetched_count=fetched_count,
            merged_count=merged_count,
            duplicates_dropped=preview_count + fetched_count - merged_count,
            **extra,
        )
