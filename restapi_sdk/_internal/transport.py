"""Opens the connection for one send and writes the request body."""

from collections.abc import Callable, Iterator

import httpx

from restapi_sdk._internal.encoding import build_url, encode_body
from restapi_sdk._internal.enums import HttpMethod
from restapi_sdk._internal.http import create_http_client
from restapi_sdk._internal.redaction import redact_headers
from restapi_sdk._internal.spec import RequestSpec
from restapi_sdk.exceptions import RestApiConfigError, RestApiConnectionError, RestApiIOError

LogFn = Callable[[str], None]


def _no_log(message: str) -> None:
    pass


class Connection:
    """An open request/response exchange.

    Owns the httpx client and the streamed response. ``close`` is idempotent
    and must be called on every exit path.
    """

    def __init__(self, client: httpx.Client, response: httpx.Response, url: str) -> None:
        self._client = client
        self._response = response
        self.url = url
        self.closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    def iter_bytes(self) -> Iterator[bytes]:
        """Drain the response body in chunks."""
        try:
            yield from self._response.iter_bytes()
        except httpx.TimeoutException as e:
            raise RestApiConnectionError(f"Timed out reading from {self.url}", url=self.url) from e
        except (httpx.TransportError, httpx.StreamError, httpx.DecodingError) as e:
            raise RestApiIOError(f"Failed reading response from {self.url}: {e}", url=self.url) from e

    def read(self) -> bytes:
        return b"".join(self.iter_bytes())

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._response.close()
        finally:
            self._client.close()


def build_headers(spec: RequestSpec) -> httpx.Headers:
    """Request properties first, then header fields; later keys win, blanks are skipped."""
    headers = httpx.Headers()
    for source in (spec.request_properties, spec.headers):
        for name, value in source.items():
            if value and value.strip():
                headers[name] = value
    if not spec.use_cache:
        headers.setdefault("Cache-Control", "no-cache")
        headers.setdefault("Pragma", "no-cache")
    return headers


def open_connection(spec: RequestSpec, log_debug: LogFn = _no_log) -> Connection:
    """Open a connection for ``spec``, write the body and wait for the response head.

    GET sends its params in the query string and never writes a body. Other
    methods write the body produced by the encoder for the spec's content
    type (unless ``do_output`` is off).

    Secure URLs get an SSLContext built from the spec's TrustPolicy for this
    connection only.

    Raises:
        RestApiConfigError: If the URL is invalid or TLS material cannot be loaded.
        RestApiEncodingError: If the payload does not match the content type.
        RestApiConnectionError: On DNS, connect, timeout or transport failure.
        RestApiIOError: If streaming the body fails.
    """
    is_get = spec.method is HttpMethod.GET
    url = build_url(spec) if is_get else spec.url
    try:
        host = httpx.URL(url).host
    except httpx.InvalidURL as e:
        raise RestApiConfigError(f"Invalid URL {url!r}: {e}") from e

    headers = build_headers(spec)
    content = None
    if not is_get and spec.do_output:
        body = encode_body(spec)
        if body.content_type and (body.override_content_type or "Content-Type" not in headers):
            headers["Content-Type"] = body.content_type
        if body.content_length is not None:
            headers["Content-Length"] = str(body.content_length)
        content = body.content

    verify = spec.trust_policy.build_ssl_context(host) if spec.is_secure else True
    client = create_http_client(
        connect_timeout_ms=spec.connect_timeout_ms,
        read_timeout_ms=spec.read_timeout_ms,
        verify=verify,
        proxy=spec.proxy,
        follow_redirects=spec.follow_redirects,
    )
    log_debug(f"{spec.method.code} {url} headers={redact_headers(headers)}")
    try:
        request = client.build_request(spec.method.code, url, headers=headers, content=content)
        response = client.send(request, stream=True)
    except httpx.TimeoutException as e:
        client.close()
        raise RestApiConnectionError(f"Timed out sending to {url}", url=url) from e
    except httpx.TransportError as e:
        client.close()
        raise RestApiConnectionError(f"Connection to {url} failed: {e}", url=url) from e
    except httpx.StreamError as e:
        client.close()
        raise RestApiIOError(f"Failed writing request body to {url}: {e}", url=url) from e
    except Exception:
        client.close()
        raise

    log_debug(f"{spec.method.code} {url} -> {response.status_code}")
    return Connection(client, response, url)
