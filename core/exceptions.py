"""Custom exception hierarchy for the browse proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        message: Error message returned to the caller
        status_code: HTTP status code of the proxy response
    """

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingParameterError(ProxyError):
    """Raised when no target URL was supplied."""

    status_code = 400

    def __init__(self, message: str = "URL parameter is required") -> None:
        super().__init__(message)


class InvalidUrlError(ProxyError):
    """Raised when the target URL is not an absolute http(s) URL."""

    status_code = 400

    def __init__(self, message: str = "Invalid URL format") -> None:
        super().__init__(message)


class RequestTooLargeError(ProxyError):
    """Request body exceeds size limit."""

    status_code = 413

    def __init__(self, message: str = "Request body too large") -> None:
        super().__init__(message)


class UpstreamError(ProxyError):
    """Raised when fetching the target fails."""


class UpstreamTimeoutError(UpstreamError):
    """Raised when the target does not respond within the fetch timeout."""

    status_code = 504

    def __init__(
        self,
        message: str = "Request timeout - the website took too long to respond",
    ) -> None:
        super().__init__(message)


class UpstreamConnectionError(UpstreamError):
    """Raised on DNS, connection or TLS failures."""

    status_code = 500

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to fetch content: {reason}")


class UpstreamHttpError(UpstreamError):
    """Raised when the target answers non-2xx with nothing worth rendering."""

    def __init__(self, status_code: int, reason_phrase: str) -> None:
        super().__init__(
            f"Failed to fetch: {status_code} {reason_phrase}".rstrip(),
            status_code=status_code,
        )
