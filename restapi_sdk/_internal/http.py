"""HTTP client configuration for a single send."""

import ssl

import httpx

from restapi_sdk._version import __version__

SDK_USER_AGENT = f"restapi-sdk/{__version__}"


def to_seconds(timeout_ms: int) -> float | None:
    """Convert a millisecond timeout; 0 or less means wait forever."""
    if timeout_ms <= 0:
        return None
    return timeout_ms / 1000


def create_http_client(
    *,
    connect_timeout_ms: int,
    read_timeout_ms: int,
    verify: ssl.SSLContext | bool = True,
    proxy: str | None = None,
    follow_redirects: bool = False,
) -> httpx.Client:
    """Create an HTTP client that serves exactly one request.

    Args:
        connect_timeout_ms: Connect timeout in milliseconds.
        read_timeout_ms: Read timeout in milliseconds. Also bounds writes.
        verify: SSLContext for secure URLs, or True for the httpx default.
        proxy: Optional proxy URL.
        follow_redirects: Follow 3xx responses.

    Returns:
        Configured httpx.Client instance.
    """
    read_timeout = to_seconds(read_timeout_ms)
    return httpx.Client(
        timeout=httpx.Timeout(
            connect=to_seconds(connect_timeout_ms),
            read=read_timeout,
            write=read_timeout,
            pool=None,
        ),
        verify=verify,
        proxy=proxy,
        follow_redirects=follow_redirects,
        # replaced by the spec's User-Agent property unless that is blank
        headers={"User-Agent": SDK_USER_AGENT},
        trust_env=False,
    )
