"""REST API SDK for Python.

A fluent builder for single outbound HTTP requests with URL-encoded, JSON,
octet-stream and multipart/form-data bodies, and per-connection TLS trust.

Public API:
    RestApiClient - Request builder (``as_get()`` / ``as_post()`` role views)
    TrustPolicy - TLS trust material for https URLs
    Result - success/msg response envelope
"""

from restapi_sdk._internal.enums import (
    HttpContentType,
    HttpMethod,
    HttpProperty,
    HttpProtocol,
    MultipartFilename,
)
from restapi_sdk._internal.response import StreamKind
from restapi_sdk._internal.trust import TrustPolicy
from restapi_sdk._version import __version__
from restapi_sdk.client import GetProxy, PostProxy, RestApiClient
from restapi_sdk.exceptions import (
    RestApiConfigError,
    RestApiConnectionError,
    RestApiEncodingError,
    RestApiError,
    RestApiIOError,
    RestApiUsageError,
)
from restapi_sdk.models import Result

__all__ = [
    "__version__",
    "RestApiClient",
    "GetProxy",
    "PostProxy",
    "TrustPolicy",
    "Result",
    "StreamKind",
    "HttpContentType",
    "HttpMethod",
    "HttpProperty",
    "HttpProtocol",
    "MultipartFilename",
    "RestApiError",
    "RestApiUsageError",
    "RestApiConfigError",
    "RestApiConnectionError",
    "RestApiEncodingError",
    "RestApiIOError",
]
