"""HTTP implementation of the remote content gateway."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import settings
from src.core.domain.exceptions import DecodeError, TransportError
from src.modules.feed.domain.gateway import FeedMeta, PaginationInfo, RawPage

HOME_FEED_PATH = "feed/home"
UPCOMING_MATCHES_PATH = "matches/upcoming"
MATCH_RESULTS_PATH = "matches/results"

RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.ConnectError)


class HttpContentGateway:
    """Talk to the content API over HTTP.

    Transient transport failures are retried with exponential backoff before
    being surfaced as :class:`TransportError`.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_sec: float | None = None,
        retry_attempts: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        self.timeout_sec = timeout_sec or settings.API_TIMEOUT_SEC
        self.retry_attempts = retry_attempts or settings.API_RETRY_ATTEMPTS
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """获取 HTTP 客户端（延迟初始化）。"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_sec,
                follow_redirects=False,
                headers={
                    "User-Agent": settings.API_USER_AGENT,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_main_feed(self, page: int, page_size: int) -> RawPage:
        payload = await self._get_json(HOME_FEED_PATH, page, page_size)
        return self._parse_page(payload, items_key="feed")

    async def fetch_upcoming_matches(self, page: int, page_size: int) -> RawPage:
        payload = await self._get_json(UPCOMING_MATCHES_PATH, page, page_size)
        return self._parse_page(payload, items_key="matches")

    async def fetch_match_results(self, page: int, page_size: int) -> RawPage:
        payload = await self._get_json(MATCH_RESULTS_PATH, page, page_size)
        return self._parse_page(payload, items_key="results")

    async def _get_json(self, path: str, page: int, page_size: int) -> Any:
        params = {"page": page, "limit": page_size}
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(
                    multiplier=settings.API_RETRY_WAIT_MIN_SEC,
                    min=settings.API_RETRY_WAIT_MIN_SEC,
                    max=settings.API_RETRY_WAIT_MAX_SEC,
                ),
                reraise=True,
            ):
                with attempt:
                    response = await self.client.get(path, params=params)
                    response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning(f"Content API timeout for {path} page={page}: {exc}")
            raise TransportError(f"Timeout: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning(f"Content API HTTP error for {path} page={page}: {status_code}")
            raise TransportError(f"HTTP {status_code}", status_code=status_code) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"Content API error for {path} page={page}: {exc}")
            raise TransportError(f"Error: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {path} is not valid JSON") from exc

    @staticmethod
    def _parse_page(payload: Any, *, items_key: str) -> RawPage:
        if not isinstance(payload, dict):
            raise DecodeError("Page payload must be a JSON object")

        items = payload.get(items_key)
        if not isinstance(items, list):
            raise DecodeError(f"Page payload missing '{items_key}' list")

        try:
            pagination = PaginationInfo.model_validate(payload.get("pagination"))
            meta_raw = payload.get("meta")
            meta = FeedMeta.model_validate(meta_raw) if meta_raw is not None else None
        except ValidationError as exc:
            raise DecodeError(f"Invalid page envelope: {exc}") from exc

        return RawPage(items=items, pagination=pagination, meta=meta)
