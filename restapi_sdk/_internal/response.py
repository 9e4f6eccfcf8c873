"""Reads the response of a sent request and releases its connection."""

import io
from enum import Enum

import httpx
from pydantic import ValidationError

from restapi_sdk._internal.transport import Connection, LogFn, _no_log
from restapi_sdk.exceptions import RestApiEncodingError, RestApiUsageError
from restapi_sdk.models import Result

SUCCESS_STATUS_CODES: frozenset[int] = frozenset({200, 201, 202})


class StreamKind(Enum):
    SUCCESS = "success"
    ERROR = "error"


def select_stream(status_code: int) -> StreamKind:
    """200/201/202 read the success stream; every other status reads the error stream."""
    if status_code in SUCCESS_STATUS_CODES:
        return StreamKind.SUCCESS
    return StreamKind.ERROR


class ResponseReader:
    """Terminal reads over one Connection.

    Exactly one read is allowed. The connection is closed after it, whether
    the read succeeds or fails. A non-2xx status is not an error: it only
    selects the error stream.
    """

    def __init__(
        self,
        connection: Connection,
        *,
        charset: str,
        do_input: bool = True,
        log_debug: LogFn = _no_log,
    ) -> None:
        self._connection = connection
        self._charset = charset
        self._do_input = do_input
        self._log_debug = log_debug
        self.status_code = connection.status_code
        self.stream_kind = select_stream(self.status_code)

    @property
    def is_success(self) -> bool:
        return self.stream_kind is StreamKind.SUCCESS

    @property
    def headers(self) -> httpx.Headers:
        return self._connection.headers

    def close(self) -> None:
        """Release the connection without reading the body."""
        self._connection.close()

    def read_bytes(self) -> bytes:
        """Drain the selected stream as raw bytes."""
        if self._connection.closed:
            raise RestApiUsageError("Response already consumed or closed")
        try:
            if not self._do_input:
                return b""
            if self.stream_kind is StreamKind.ERROR:
                self._log_debug(f"Reading error stream (status {self.status_code})")
            return self._connection.read()
        finally:
            self._connection.close()

    def read_text(self) -> str:
        """Drain the selected stream as text; line breaks are dropped."""
        text = self.read_bytes().decode(self._charset, errors="replace")
        return text.replace("\r\n", "").replace("\r", "").replace("\n", "")

    def read_stream(self) -> io.BytesIO:
        """Drain the selected stream into an in-memory binary stream."""
        return io.BytesIO(self.read_bytes())

    def read_result(self) -> Result:
        """Decode the body into the success/msg result envelope."""
        text = self.read_text()
        try:
            return Result.model_validate_json(text)
        except ValidationError as e:
            raise RestApiEncodingError(f"Response is not a result envelope: {e}") from e
