"""Remote content gateway port and raw wire models."""

from typing import Any, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Raw model read from the API's camelCase JSON."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class PaginationInfo(WireModel):
    current_page: int = Field(..., alias="currentPage", ge=1)
    total_pages: int = Field(..., alias="totalPages", ge=0)
    total_items: int = Field(..., alias="totalItems", ge=0)
    items_per_page: int | None = Field(default=None, alias="itemsPerPage")
    has_next: bool = Field(..., alias="hasNext")
    has_previous: bool = Field(..., alias="hasPrevious")
    is_special_page: bool = Field(default=False, alias="isSpecialPage")


class FeedMeta(WireModel):
    generated_at: str | None = Field(default=None, alias="generatedAt")
    api_version: str | None = Field(default=None, alias="version")


class RawFeedItem(WireModel):
    """One type-tagged entry of the home feed with an opaque payload."""

    type: str
    id: str
    timestamp: int
    priority: int | None = None
    payload: Any = Field(
        default=None, validation_alias=AliasChoices("data", "payload")
    )


class RawPage(WireModel):
    """A page as returned by the gateway, before item decoding.

    ``items`` stays raw so that one bad entry cannot fail the whole page.
    """

    items: list[Any] = Field(default_factory=list)
    pagination: PaginationInfo
    meta: FeedMeta | None = None


class ContentGateway(Protocol):
    """Port for the remote content API.

    Implementations raise ``TransportError`` for network failures and
    ``DecodeError`` for malformed envelopes.
    """

    async def fetch_main_feed(self, page: int, page_size: int) -> RawPage: ...

    async def fetch_upcoming_matches(self, page: int, page_size: int) -> RawPage: ...

    async def fetch_match_results(self, page: int, page_size: int) -> RawPage: ...

    async def aclose(self) -> None: ...
