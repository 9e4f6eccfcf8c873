"""Fluent builder for one outbound REST API request.

Example:
    from restapi_sdk import HttpContentType, RestApiClient

    text = (
        RestApiClient.new_instance("http://localhost:8090/api/items")
        .add_header_field("x-api-key", "key")
        .as_post()
        .set_content_type(HttpContentType.APPLICATION_JSON)
        .add_param("one", 1)
        .get_response_string()
    )

Each RestApiClient sends exactly one request. Configure it, pick a role view
with ``as_get()`` or ``as_post()``, then call one terminal read. After a bare
``send()`` that is not followed by a read, call ``close()`` or use the role
view as a context manager.
"""

import io
import os
import sys
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self

import httpx

from restapi_sdk._internal.enums import (
    HttpContentType,
    HttpMethod,
    HttpProperty,
    HttpProtocol,
    MultipartFilename,
)
from restapi_sdk._internal.response import ResponseReader
from restapi_sdk._internal.spec import (
    DEFAULT_CHARSET,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    FilePart,
    RequestSpec,
)
from restapi_sdk._internal.transport import open_connection
from restapi_sdk._internal.trust import TrustPolicy
from restapi_sdk.exceptions import RestApiConfigError, RestApiUsageError
from restapi_sdk.models import Result


class RestApiClient:
    """Configuration core for a single request.

    Setters mutate this instance and return it, so calls can be chained.
    After the request is sent the instance is consumed; build a new one for
    the next request.
    """

    def __init__(
        self,
        url: str,
        *,
        protocol: HttpProtocol | None = None,
        charset: str = DEFAULT_CHARSET,
        debug: bool = False,
    ) -> None:
        """Initialize the builder.

        Args:
            url: Target URL. Without an ``http``/``https`` prefix the scheme of
                ``protocol`` is prepended.
            protocol: Scheme for URLs without one (default: https).
            charset: Charset for text bodies and decoded responses.
            debug: Enable debug logging to stderr.
        """
        target = url.strip() if url else ""
        if not target:
            raise RestApiConfigError("URL must not be blank")
        if not target.lower().startswith(HttpProtocol.HTTP.code):
            target = f"{(protocol or HttpProtocol.HTTPS).code}://{target}"

        self._spec = RequestSpec(url=target, charset=charset)
        self._debug = debug
        self._sent = False

    @classmethod
    def new_instance(
        cls,
        url: str,
        protocol: HttpProtocol | None = None,
        charset: str = DEFAULT_CHARSET,
    ) -> "RestApiClient":
        """Create a fresh builder for ``url``."""
        return cls(url, protocol=protocol, charset=charset)

    @classmethod
    def from_env(cls, url: str, protocol: HttpProtocol | None = None) -> "RestApiClient":
        """Create a builder whose defaults come from environment variables.

        Optional environment variables:
            RESTAPI_CHARSET: Charset for bodies and responses.
            RESTAPI_CONNECT_TIMEOUT_MS: Connect timeout in milliseconds.
            RESTAPI_READ_TIMEOUT_MS: Read timeout in milliseconds.
            RESTAPI_USER_AGENT: User-Agent request property.
            RESTAPI_PROXY: Proxy URL.
            RESTAPI_DEBUG: Set to "1" to enable debug logging.

        Raises:
            ValueError: If a timeout variable is not a valid integer.
        """
        charset = os.environ.get("RESTAPI_CHARSET") or DEFAULT_CHARSET
        debug = os.environ.get("RESTAPI_DEBUG", "") == "1"
        connect_timeout_ms = int(
            os.environ.get("RESTAPI_CONNECT_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))
        )
        read_timeout_ms = int(os.environ.get("RESTAPI_READ_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)))

        client = cls(url, protocol=protocol, charset=charset, debug=debug)
        client.set_connect_timeout(connect_timeout_ms).set_read_timeout(read_timeout_ms)
        client.set_user_agent(os.environ.get("RESTAPI_USER_AGENT") or DEFAULT_USER_AGENT)
        client.set_proxy(os.environ.get("RESTAPI_PROXY") or None)
        return client

    @property
    def spec(self) -> RequestSpec:
        """The request state this builder configures."""
        return self._spec

    @property
    def url(self) -> str:
        return self._spec.url

    @property
    def sent(self) -> bool:
        return self._sent

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[restapi-sdk] {message}", file=sys.stderr)

    # =========================================================================
    # Role views
    # =========================================================================

    def as_get(self, method: HttpMethod = HttpMethod.GET) -> "GetProxy":
        """Query-style request: params go into the URL, no body is written."""
        self._spec.method = method
        return GetProxy(self)

    def as_post(self, method: HttpMethod = HttpMethod.POST) -> "PostProxy":
        """Body-style request; use ``method`` for PUT, DELETE or PATCH."""
        self._spec.method = method
        return PostProxy(self)

    # =========================================================================
    # Setters
    # =========================================================================

    def set_connect_timeout(self, timeout_ms: int) -> Self:
        self._spec.connect_timeout_ms = timeout_ms
        return self

    def set_read_timeout(self, timeout_ms: int) -> Self:
        self._spec.read_timeout_ms = timeout_ms
        return self

    def set_user_agent(self, user_agent: str) -> Self:
        self._spec.request_properties[HttpProperty.USER_AGENT.code] = user_agent
        return self

    def set_charset(self, charset: str) -> Self:
        self._spec.charset = charset
        return self

    def set_proxy(self, proxy: str | None) -> Self:
        """Route the request through a proxy, e.g. ``http://web-proxy:8080``."""
        self._spec.proxy = proxy
        return self

    def set_trust_policy(self, trust_policy: TrustPolicy | None) -> Self:
        """TLS trust for https URLs. ``None`` is ignored."""
        if trust_policy is not None:
            self._spec.trust_policy = trust_policy
        return self

    def set_do_input(self, do_input: bool) -> Self:
        self._spec.do_input = do_input
        return self

    def set_do_output(self, do_output: bool) -> Self:
        self._spec.do_output = do_output
        return self

    def set_use_cache(self, use_cache: bool) -> Self:
        self._spec.use_cache = use_cache
        return self

    def set_follow_redirects(self, follow_redirects: bool) -> Self:
        self._spec.follow_redirects = follow_redirects
        return self

    def set_multipart_filename(self, policy: MultipartFilename) -> Self:
        self._spec.multipart_filename = policy
        return self

    def add_request_property(self, name: HttpProperty | str, value: str) -> Self:
        key = name.code if isinstance(name, HttpProperty) else name
        self._spec.request_properties[key] = value
        return self

    def add_header_field(self, name: str, value: str) -> Self:
        """Add a header. Header fields are applied after request properties."""
        self._spec.headers[name] = value
        return self

    # =========================================================================
    # Sending
    # =========================================================================

    def _send(self) -> ResponseReader:
        if self._sent:
            raise RestApiUsageError(
                "Request already sent; create a new RestApiClient for another request"
            )
        self._sent = True
        connection = open_connection(self._spec, self._log_debug)
        return ResponseReader(
            connection,
            charset=self._spec.charset,
            do_input=self._spec.do_input,
            log_debug=self._log_debug,
        )


class _RoleView:
    """Operations both role views expose: params, send and terminal reads.

    GetProxy and PostProxy are siblings over this base; neither extends the
    other.
    """

    def __init__(self, client: RestApiClient) -> None:
        self._client = client
        self._reader: ResponseReader | None = None

    @property
    def client(self) -> RestApiClient:
        return self._client

    def add_param(self, key: str, value: Any) -> Self:
        self._client.spec.params[key] = value
        return self

    def add_params(self, params: Mapping[str, Any] | None) -> Self:
        """Add params; existing keys are replaced."""
        if params:
            self._client.spec.params.update(params)
        return self

    def send(self) -> Self:
        """Open the connection, write the request and read the status line.

        Raises:
            RestApiUsageError: If this builder already sent its request.
        """
        self._reader = self._client._send()
        return self

    def _response(self) -> ResponseReader:
        if self._reader is None:
            raise RestApiUsageError("Please call send() first")
        return self._reader

    @property
    def status_code(self) -> int:
        return self._response().status_code

    @property
    def is_success(self) -> bool:
        """True when the status selected the success stream (200/201/202)."""
        return self._response().is_success

    @property
    def headers(self) -> httpx.Headers:
        """Response headers of the sent request."""
        return self._response().headers

    def close(self) -> None:
        """Release the connection if the body is not going to be read.

        Safe to call more than once, before send() or after a read.
        """
        if self._reader is not None:
            self._reader.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def read_bytes(self) -> bytes:
        return self._response().read_bytes()

    def read_text(self) -> str:
        return self._response().read_text()

    def read_stream(self) -> io.BytesIO:
        return self._response().read_stream()

    def read_result(self) -> Result:
        return self._response().read_result()

    def get_response_bytes(self) -> bytes:
        """Send and return the response body as bytes."""
        return self.send().read_bytes()

    def get_response_string(self) -> str:
        """Send and return the response body as text with line breaks dropped."""
        return self.send().read_text()

    def get_response_stream(self) -> io.BytesIO:
        """Send and return the drained response body as a binary stream."""
        return self.send().read_stream()

    def get_response_result(self) -> Result:
        """Send and decode the response body into a Result envelope."""
        return self.send().read_result()


class GetProxy(_RoleView):
    """GET role: params only. Files and payloads are not reachable."""


class PostProxy(_RoleView):
    """POST role: params, file parts, raw payload and content type."""

    def add_file_part(
        self,
        name: str,
        path: str | os.PathLike[str],
        filename: str | None = None,
    ) -> Self:
        """Attach a file for multipart/form-data.

        Args:
            name: Form field name.
            path: File to upload.
            filename: Filename sent in Content-Disposition. Defaults to the
                builder's MultipartFilename policy (the field name unless
                changed).
        """
        self._client.spec.file_parts[name] = FilePart(path=path, filename=filename)
        return self

    def set_payload(self, payload: Any) -> Self:
        """Raw body object: JSON-convertible for JSON, bytes for octet-stream."""
        self._client.spec.payload = payload
        return self

    def set_content_type(self, content_type: HttpContentType | None) -> Self:
        """Select the body encoding. ``None`` is ignored."""
        if content_type is None:
            return self
        self._client.spec.content_type = content_type
        self._client.spec.request_properties[HttpProperty.CONTENT_TYPE.code] = content_type.code
        return self
