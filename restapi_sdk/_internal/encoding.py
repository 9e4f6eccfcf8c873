"""Request body encoders.

Every HttpContentType variant has exactly one encoder. ``encode_body`` picks
the encoder for the spec's content type; the encoder returns the exact bytes
to write (or a chunk iterator for multipart) plus the Content-Type value the
body needs.
"""

import json
import os
import time
from collections.abc import Callable, Iterator, Mapping, Sequence, Set
from dataclasses import dataclass, is_dataclass
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError, to_jsonable_python

from restapi_sdk._internal.enums import HttpContentType, MultipartFilename
from restapi_sdk._internal.spec import FilePart, RequestSpec
from restapi_sdk.exceptions import RestApiEncodingError, RestApiIOError

MAX_CHUNK_SIZE = 1024 * 1024  # 1 MiB
BOUNDARY_MARKER = "*****"
FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data; boundary={boundary}"

_CRLF = "\r\n"
_FILE_PART_HEAD = (
    "--{boundary}\r\n"
    'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
    "Content-Transfer-Encoding: binary\r\n"
    "\r\n"
)
_PARAM_PART = (
    "--{boundary}\r\n"
    'Content-Disposition: form-data; name="{name}"\r\n'
    "Content-Type: text/plain\r\n"
    "\r\n"
    "{value}\r\n"
)
_CLOSING = "--{boundary}--\r\n"


@dataclass(frozen=True)
class EncodedBody:
    """Bytes for one request body.

    ``override_content_type`` is set when the body cannot be read without its
    own Content-Type (multipart boundary); otherwise a caller-provided
    Content-Type wins.
    """

    content: bytes | Iterator[bytes]
    content_type: str | None = None
    content_length: int | None = None
    override_content_type: bool = False


def stringify(value: Any) -> str:
    """Render a scalar parameter the way it goes on the wire."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_file_reference(value: Any) -> bool:
    return isinstance(value, (os.PathLike, FilePart))


def encode_query(params: Mapping[str, Any]) -> str:
    """Join params as ``key=value`` pairs with ``&``, skipping file references."""
    return "&".join(
        f"{key}={stringify(value)}"
        for key, value in params.items()
        if not is_file_reference(value)
    )


def build_url(spec: RequestSpec) -> str:
    """URL for a GET request: the params go into the query string."""
    query = encode_query(spec.params)
    if not query:
        return spec.url
    separator = "&" if "?" in spec.url else "?"
    return f"{spec.url}{separator}{query}"


def new_boundary() -> str:
    return f"{BOUNDARY_MARKER}{time.time_ns()}{BOUNDARY_MARKER}"


# =============================================================================
# Encoders
# =============================================================================


def encode_urlencoded(spec: RequestSpec) -> EncodedBody:
    content = encode_query(spec.params).encode(spec.charset)
    return EncodedBody(content, FORM_URLENCODED, len(content))


def encode_json(spec: RequestSpec) -> EncodedBody:
    """Serialize the payload (and params) as JSON.

    A list-like payload is sent as a JSON array and params are ignored.
    Anything else becomes a JSON object with every param merged in as a
    top-level field; params win on key collision.
    """
    document = _to_json_document(spec.payload)
    if isinstance(document, dict):
        document.update(spec.params)

    try:
        text = json.dumps(
            document,
            separators=(",", ":"),
            ensure_ascii=False,
            default=to_jsonable_python,
        )
    except (TypeError, ValueError, PydanticSerializationError) as e:
        raise RestApiEncodingError(f"Cannot serialize JSON body: {e}") from e
    content = text.encode(spec.charset)
    return EncodedBody(content, HttpContentType.APPLICATION_JSON.code, len(content))


def encode_octet_stream(spec: RequestSpec) -> EncodedBody:
    payload = spec.payload
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise RestApiEncodingError(
            f"{HttpContentType.APPLICATION_OCTET_STREAM.code} requires a bytes payload, "
            f"got {type(payload).__name__}"
        )
    content = bytes(payload)
    return EncodedBody(content, HttpContentType.APPLICATION_OCTET_STREAM.code, len(content))


def encode_multipart(spec: RequestSpec, boundary: str | None = None) -> EncodedBody:
    """Build a multipart/form-data body: all files first, then all params.

    File bytes are streamed in chunks of at most MAX_CHUNK_SIZE. The exact
    Content-Length is computed from the file sizes before anything is sent.

    Raises:
        RestApiIOError: If a file part does not exist.
    """
    boundary = boundary or new_boundary()
    charset = spec.charset

    files: list[tuple[bytes, str]] = []
    length = 0
    for name, part in spec.file_parts.items():
        path = os.fspath(part.path)
        if not os.path.isfile(path):
            raise RestApiIOError(f"File part '{name}' not found: {path}", url=spec.url)
        head = _FILE_PART_HEAD.format(
            boundary=boundary,
            name=name,
            filename=_filename_for(name, part, spec.multipart_filename),
        ).encode(charset)
        files.append((head, path))
        length += len(head) + os.path.getsize(path) + len(_CRLF)

    params = [
        _PARAM_PART.format(boundary=boundary, name=name, value=stringify(value)).encode(charset)
        for name, value in spec.params.items()
    ]
    closing = _CLOSING.format(boundary=boundary).encode(charset)
    length += sum(len(param) for param in params) + len(closing)

    return EncodedBody(
        _iter_multipart(files, params, closing, spec.url),
        MULTIPART_CONTENT_TYPE.format(boundary=boundary),
        length,
        override_content_type=True,
    )


_ENCODERS: dict[HttpContentType, Callable[[RequestSpec], EncodedBody]] = {
    HttpContentType.DEFAULT: encode_urlencoded,
    HttpContentType.APPLICATION_JSON: encode_json,
    HttpContentType.APPLICATION_OCTET_STREAM: encode_octet_stream,
    HttpContentType.MULTIPART_FORM_DATA: encode_multipart,
}


def encode_body(spec: RequestSpec) -> EncodedBody:
    """Encode the request body for the spec's content type."""
    return _ENCODERS[spec.content_type](spec)


# =============================================================================
# Helpers
# =============================================================================


def _is_list_like(payload: Any) -> bool:
    if isinstance(payload, (str, bytes, bytearray, memoryview, Mapping)):
        return False
    return isinstance(payload, (Sequence, Set))


def _to_json_document(payload: Any) -> dict[str, Any] | list[Any]:
    """Return a JSON array (list) or a JSON object (dict) for the payload."""
    if payload is None:
        return {}
    if isinstance(payload, Mapping):
        return dict(payload)
    if _is_list_like(payload):
        return list(payload)
    if isinstance(payload, BaseModel) or is_dataclass(payload):
        try:
            converted = to_jsonable_python(payload)
        except PydanticSerializationError as e:
            raise RestApiEncodingError(
                f"Cannot convert {type(payload).__name__} to JSON: {e}"
            ) from e
        # root models can convert to anything
        if isinstance(converted, (dict, list)):
            return converted
        raise RestApiEncodingError(
            f"{type(payload).__name__} converts to {type(converted).__name__}, "
            "not a JSON array or object"
        )
    if hasattr(payload, "__dict__"):
        # plain objects: public attributes only
        return {key: value for key, value in vars(payload).items() if not key.startswith("_")}
    raise RestApiEncodingError(
        f"JSON payload must be list-like or object-like, got {type(payload).__name__}"
    )


def _filename_for(name: str, part: FilePart, policy: MultipartFilename) -> str:
    if part.filename is not None:
        return part.filename
    if policy is MultipartFilename.BASENAME:
        return os.path.basename(os.fspath(part.path))
    return name


def _iter_multipart(
    files: list[tuple[bytes, str]],
    params: list[bytes],
    closing: bytes,
    url: str,
) -> Iterator[bytes]:
    crlf = _CRLF.encode("ascii")
    for head, path in files:
        yield head
        yield from _iter_file(path, url)
        yield crlf
    yield from params
    yield closing


def _iter_file(path: str, url: str) -> Iterator[bytes]:
    try:
        with open(path, "rb") as f:
            while chunk := f.read(MAX_CHUNK_SIZE):
                yield chunk
    except OSError as e:
        raise RestApiIOError(f"Failed reading file part {path}: {e}", url=url) from e
