"""Mutable request state shared by the builder, encoder and transport."""

import os
from dataclasses import dataclass, field
from typing import Any

from restapi_sdk._internal.enums import HttpContentType, HttpMethod, HttpProperty, MultipartFilename
from restapi_sdk._internal.trust import TrustPolicy

DEFAULT_CHARSET = "utf8"
DEFAULT_TIMEOUT_MS = 70000
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows; U; Windows NT 6.1; zh-CN; rv:1.9.2.6)"


@dataclass(frozen=True)
class FilePart:
    """A file attached to a multipart request.

    ``filename`` overrides the filename sent in Content-Disposition; when
    None the spec's MultipartFilename policy decides.
    """

    path: str | os.PathLike[str]
    filename: str | None = None


@dataclass
class RequestSpec:
    url: str
    method: HttpMethod = HttpMethod.GET
    content_type: HttpContentType = HttpContentType.DEFAULT
    charset: str = DEFAULT_CHARSET
    connect_timeout_ms: int = DEFAULT_TIMEOUT_MS
    read_timeout_ms: int = DEFAULT_TIMEOUT_MS
    headers: dict[str, str] = field(default_factory=dict)
    request_properties: dict[str, str] = field(
        default_factory=lambda: {HttpProperty.USER_AGENT.code: DEFAULT_USER_AGENT}
    )
    params: dict[str, Any] = field(default_factory=dict)
    file_parts: dict[str, FilePart] = field(default_factory=dict)
    payload: Any = None
    proxy: str | None = None
    trust_policy: TrustPolicy = field(default_factory=TrustPolicy)
    do_input: bool = True
    do_output: bool = True
    use_cache: bool = False
    follow_redirects: bool = False
    multipart_filename: MultipartFilename = MultipartFilename.FIELD_NAME

    @property
    def is_secure(self) -> bool:
        return self.url.lower().startswith("https")
