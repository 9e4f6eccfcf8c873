"""Public exceptions for the REST API SDK."""


class RestApiError(Exception):
    """Base exception for all REST API SDK errors."""


class RestApiUsageError(RestApiError):
    """Builder used out of order (read before send, second send, second read)."""


class RestApiConfigError(RestApiError):
    """Configuration error (blank URL, unusable TLS key material)."""


class RestApiEncodingError(RestApiError):
    """Payload does not match the declared content type."""


class RestApiConnectionError(RestApiError):
    """DNS, connect, timeout or other transport-level failure."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RestApiIOError(RestApiError):
    """Failure while streaming request bytes or draining the response."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url
