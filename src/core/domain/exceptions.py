"""Base domain exceptions.

所有分页引擎异常都继承自 FeedError，并通过 error_code 类属性标识错误类别。
"""


class FeedError(Exception):
    """Base exception for all feed engine errors."""

    error_code: str = "FEED_ERROR"

    def __init__(self, message: str = "A feed error occurred"):
        self.message = message
        super().__init__(self.message)


class TransportError(FeedError):
    """Raised when the remote content API cannot be reached or times out."""

    error_code = "TRANSPORT_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(FeedError):
    """Raised when a page envelope is malformed.

    Fatal for the page being loaded; individual bad items are not DecodeErrors.
    """

    error_code = "DECODE_ERROR"


class InvalidPageRequestError(FeedError):
    """Raised when a page request carries an impossible key or size."""

    error_code = "INVALID_PAGE_REQUEST"
