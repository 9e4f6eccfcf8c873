"""Closed variants used by the request builder."""

from enum import Enum
from typing import Self


class _CodedEnum(Enum):
    """Enum whose members carry a wire code and a description."""

    def __init__(self, code: str, description: str) -> None:
        self.code = code
        self.description = description

    @classmethod
    def get_by_code(cls, code: str) -> Self | None:
        for item in cls:
            if item.code == code:
                return item
        return None

    @classmethod
    def get_by_description(cls, description: str) -> Self | None:
        for item in cls:
            if item.description == description:
                return item
        return None


class HttpMethod(_CodedEnum):
    GET = ("GET", "Read")
    POST = ("POST", "Update/Replace")
    PUT = ("PUT", "Update/Replace")
    DELETE = ("DELETE", "Delete")
    PATCH = ("PATCH", "Partial Update/Modify")


class HttpContentType(_CodedEnum):
    """Declared request body encoding.

    DEFAULT has an empty code: it is sent as
    ``application/x-www-form-urlencoded`` unless the caller sets a header.
    """

    DEFAULT = ("", "default")
    APPLICATION_JSON = ("application/json", "json")
    APPLICATION_OCTET_STREAM = ("application/octet-stream", "binary stream")
    MULTIPART_FORM_DATA = ("multipart/form-data", "text,file")


class HttpProperty(_CodedEnum):
    CONTENT_TYPE = ("Content-Type", "send params type")
    CONTENT_LENGTH = ("Content-Length", "content length")
    CONNECTION = ("Connection", "connection")
    CHARSET = ("Charset", "Charset")
    USER_AGENT = ("User-Agent", "user agent")


class HttpProtocol(_CodedEnum):
    HTTP = ("http", "http")
    HTTPS = ("https", "https")


class MultipartFilename(Enum):
    """Where the ``filename`` of a multipart file part comes from."""

    FIELD_NAME = "field_name"  # form field name doubles as the filename
    BASENAME = "basename"  # base name of the file on disk
