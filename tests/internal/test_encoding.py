"""Tests for request body encoders."""

import json
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import BaseModel, RootModel

from restapi_sdk._internal.encoding import (
    FORM_URLENCODED,
    build_url,
    encode_body,
    encode_json,
    encode_multipart,
    encode_octet_stream,
    encode_query,
    encode_urlencoded,
    new_boundary,
    stringify,
)
from restapi_sdk._internal.enums import HttpContentType, MultipartFilename
from restapi_sdk._internal.spec import FilePart, RequestSpec
from restapi_sdk.exceptions import RestApiEncodingError, RestApiIOError


def make_spec(**kwargs) -> RequestSpec:
    return RequestSpec(url="http://test/api", **kwargs)


def multipart_bytes(spec: RequestSpec, boundary: str = "BOUNDARY") -> bytes:
    return b"".join(encode_multipart(spec, boundary=boundary).content)


class TestStringify:
    """Tests for stringify."""

    def test_scalars(self):
        """Booleans and None use their wire spelling."""
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify(None) == "null"
        assert stringify(1) == "1"
        assert stringify("2") == "2"


class TestUrlEncoded:
    """Tests for urlencoded params."""

    def test_joins_pairs_without_trailing_separator(self):
        """Pairs are joined by exactly one '&'."""
        query = encode_query({"one": 1, "two": "2", "three": True})
        assert query == "one=1&two=2&three=true"
        assert not query.endswith("&")

    def test_skips_file_references(self):
        """Path and FilePart values never reach the query string."""
        query = encode_query(
            {"one": 1, "upload": Path("/tmp/a.txt"), "other": FilePart("/tmp/b.txt"), "two": 2}
        )
        assert query == "one=1&two=2"

    def test_empty(self):
        """No params give an empty string."""
        assert encode_query({}) == ""

    def test_body_uses_charset(self):
        """POST body is the query encoded with the charset."""
        body = encode_urlencoded(make_spec(params={"name": "Zoë"}, charset="utf8"))
        assert body.content == "name=Zoë".encode("utf-8")
        assert body.content_type == FORM_URLENCODED
        assert body.content_length == len(body.content)
        assert body.override_content_type is False


class TestBuildUrl:
    """Tests for GET URL building."""

    def test_no_params_keeps_url(self):
        """Without params the URL is unchanged and has no '?'."""
        assert build_url(make_spec()) == "http://test/api"

    def test_appends_query(self):
        """Params are appended after '?'."""
        assert build_url(make_spec(params={"one": 1, "two": "2"})) == "http://test/api?one=1&two=2"

    def test_existing_query(self):
        """An existing query string is extended with '&'."""
        spec = RequestSpec(url="http://test/api?page=1", params={"size": 10})
        assert build_url(spec) == "http://test/api?page=1&size=10"


class TestJson:
    """Tests for the JSON encoder."""

    def test_list_payload_is_array(self):
        """A list payload is serialized as-is."""
        body = encode_json(make_spec(payload=["aa", "bb"]))
        assert body.content == b'["aa","bb"]'
        assert body.content_type == "application/json"

    def test_list_payload_ignores_params(self):
        """Params are not merged into an array."""
        body = encode_json(make_spec(payload=("aa",), params={"one": 1}))
        assert body.content == b'["aa"]'

    @pytest.mark.parametrize(
        "payload",
        [deque(["aa", "bb"]), frozenset(["aa"]), range(2)],
        ids=["deque", "frozenset", "range"],
    )
    def test_any_sequence_or_set_is_array(self, payload):
        """Every sequence or set payload is sent as an array."""
        body = encode_json(make_spec(payload=payload, params={"one": 1}))
        assert json.loads(body.content) == list(payload)

    def test_string_payload_is_not_array(self):
        """Text is not treated as a sequence of characters."""
        with pytest.raises(RestApiEncodingError):
            encode_json(make_spec(payload="aa"))

    def test_list_root_model_is_array(self):
        """A root model converting to a list is sent as an array, params ignored."""
        payload = RootModel[list[str]](["aa", "bb"])
        body = encode_json(make_spec(payload=payload, params={"one": 1}))
        assert body.content == b'["aa","bb"]'

    def test_dict_root_model_gets_params(self):
        """A root model converting to an object still takes params."""
        payload = RootModel[dict[str, int]]({"one": 1})
        body = encode_json(make_spec(payload=payload, params={"two": 2}))
        assert body.content == b'{"one":1,"two":2}'

    def test_scalar_root_model_rejected(self):
        """A root model converting to a scalar is an encoding error."""
        with pytest.raises(RestApiEncodingError):
            encode_json(make_spec(payload=RootModel[str]("aa")))

    def test_params_added_to_object(self):
        """Params become top-level fields."""
        body = encode_json(make_spec(payload={"one": 1}, params={"two": 2}))
        assert body.content == b'{"one":1,"two":2}'

    def test_params_win_on_collision(self):
        """A param replaces the payload field with the same key."""
        body = encode_json(make_spec(payload={"one": 1}, params={"one": 5}))
        assert body.content == b'{"one":5}'

    def test_no_payload_starts_from_empty_object(self):
        """Without a payload the params form the object."""
        body = encode_json(make_spec(params={"one": 1, "two": "2"}))
        assert json.loads(body.content) == {"one": 1, "two": "2"}

    def test_no_payload_no_params(self):
        """Nothing to send gives an empty object."""
        assert encode_json(make_spec()).content == b"{}"

    def test_pydantic_payload(self):
        """Pydantic models are converted to objects."""

        class Item(BaseModel):
            one: int
            two: str

        body = encode_json(make_spec(payload=Item(one=1, two="2"), params={"three": 3}))
        assert body.content == b'{"one":1,"two":"2","three":3}'

    def test_dataclass_payload(self):
        """Dataclasses are converted to objects."""

        @dataclass
        class Item:
            one: int

        assert encode_json(make_spec(payload=Item(one=1))).content == b'{"one":1}'

    def test_plain_object_payload(self):
        """Plain objects contribute their public attributes."""

        class Item:
            def __init__(self):
                self.one = 1
                self._hidden = "x"

        assert encode_json(make_spec(payload=Item())).content == b'{"one":1}'

    def test_non_ascii_kept(self):
        """Non-ASCII text is not escaped."""
        body = encode_json(make_spec(params={"name": "Zoë"}))
        assert body.content == '{"name":"Zoë"}'.encode("utf-8")

    def test_scalar_payload_rejected(self):
        """A payload that is neither list-like nor object-like is an encoding error."""
        with pytest.raises(RestApiEncodingError):
            encode_json(make_spec(payload=42))


class TestOctetStream:
    """Tests for the octet-stream encoder."""

    def test_writes_bytes_verbatim(self):
        """Exactly the payload bytes, no framing."""
        body = encode_octet_stream(make_spec(payload=bytes([0x01, 0x02, 0x03])))
        assert body.content == b"\x01\x02\x03"
        assert len(body.content) == 3
        assert body.content_type == "application/octet-stream"

    def test_accepts_bytearray(self):
        """bytearray payloads are accepted."""
        assert encode_octet_stream(make_spec(payload=bytearray(b"ab"))).content == b"ab"

    @pytest.mark.parametrize("payload", [None, "text", {"one": 1}])
    def test_non_binary_payload_rejected(self, payload):
        """Anything but bytes is an encoding error."""
        with pytest.raises(RestApiEncodingError):
            encode_octet_stream(make_spec(payload=payload))


class TestMultipart:
    """Tests for the multipart/form-data encoder."""

    def test_exact_layout(self, tmp_path):
        """Files come first, then params, then the closing boundary."""
        za = tmp_path / "za.txt"
        za.write_bytes(b"file-a")
        spec = make_spec(params={"one": 1, "two": "2"}, file_parts={"filea": FilePart(za)})

        expected = (
            b"--BOUNDARY\r\n"
            b'Content-Disposition: form-data; name="filea"; filename="filea"\r\n'
            b"Content-Transfer-Encoding: binary\r\n"
            b"\r\n"
            b"file-a\r\n"
            b"--BOUNDARY\r\n"
            b'Content-Disposition: form-data; name="one"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"1\r\n"
            b"--BOUNDARY\r\n"
            b'Content-Disposition: form-data; name="two"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"2\r\n"
            b"--BOUNDARY--\r\n"
        )
        assert multipart_bytes(spec) == expected

    def test_content_type_and_length(self, tmp_path):
        """Content-Type carries the boundary and the length is exact."""
        za = tmp_path / "za.txt"
        za.write_bytes(b"x" * 100)
        spec = make_spec(params={"one": 1}, file_parts={"filea": FilePart(za)})

        body = encode_multipart(spec, boundary="BOUNDARY")
        assert body.content_type == "multipart/form-data; boundary=BOUNDARY"
        assert body.override_content_type is True
        assert body.content_length == len(b"".join(body.content))

    def test_one_part_per_file_and_param(self, tmp_path):
        """Every file and param gets its own part."""
        za = tmp_path / "za.txt"
        zb = tmp_path / "zb.txt"
        za.write_bytes(b"a")
        zb.write_bytes(b"b")
        spec = make_spec(
            params={"one": 1, "two": "2", "three": 3},
            file_parts={"filea": FilePart(za), "fileb": FilePart(zb)},
        )

        data = multipart_bytes(spec)
        assert data.startswith(b"--BOUNDARY\r\n")
        assert data.endswith(b"--BOUNDARY--\r\n")
        assert data.count(b"--BOUNDARY\r\n") == 5
        assert data.count(b"Content-Transfer-Encoding: binary") == 2
        assert data.count(b"Content-Type: text/plain") == 3

    def test_params_only(self):
        """Without files the body holds only param parts."""
        data = multipart_bytes(make_spec(params={"one": 1}))
        assert data.startswith(b'--BOUNDARY\r\nContent-Disposition: form-data; name="one"\r\n')
        assert data.endswith(b"1\r\n--BOUNDARY--\r\n")

    def test_empty(self):
        """No parts gives just the closing boundary."""
        assert multipart_bytes(make_spec()) == b"--BOUNDARY--\r\n"

    def test_file_streamed_in_bounded_chunks(self, tmp_path):
        """File bytes are yielded in chunks no larger than the cap."""
        za = tmp_path / "za.bin"
        za.write_bytes(bytes(range(10)))
        spec = make_spec(file_parts={"filea": FilePart(za)})

        with patch("restapi_sdk._internal.encoding.MAX_CHUNK_SIZE", 4):
            chunks = list(encode_multipart(spec, boundary="B").content)

        file_chunks = chunks[1:4]
        assert file_chunks == [bytes(range(4)), bytes(range(4, 8)), bytes(range(8, 10))]

    def test_filename_basename_policy(self, tmp_path):
        """BASENAME sends the file's own name."""
        za = tmp_path / "za.txt"
        za.write_bytes(b"a")
        spec = make_spec(
            file_parts={"filea": FilePart(za)},
            multipart_filename=MultipartFilename.BASENAME,
        )
        assert b'name="filea"; filename="za.txt"' in multipart_bytes(spec)

    def test_explicit_filename_wins(self, tmp_path):
        """A per-part filename overrides the policy."""
        za = tmp_path / "za.txt"
        za.write_bytes(b"a")
        spec = make_spec(file_parts={"filea": FilePart(za, filename="report.csv")})
        assert b'name="filea"; filename="report.csv"' in multipart_bytes(spec)

    def test_missing_file(self, tmp_path):
        """A missing file fails before anything is streamed."""
        spec = make_spec(file_parts={"filea": FilePart(tmp_path / "missing.txt")})
        with pytest.raises(RestApiIOError):
            encode_multipart(spec)

    def test_boundary_is_unique(self):
        """Each boundary embeds a fresh timestamp inside the marker."""
        first = new_boundary()
        assert first.startswith("*****")
        assert first.endswith("*****")
        assert first[5:-5].isdigit()


class TestEncodeBody:
    """encode_body dispatches on content type."""

    def test_default_is_urlencoded(self):
        """DEFAULT uses the urlencoded encoder."""
        body = encode_body(make_spec(params={"one": 1}))
        assert body.content == b"one=1"

    def test_json(self):
        """APPLICATION_JSON uses the JSON encoder."""
        spec = make_spec(content_type=HttpContentType.APPLICATION_JSON, params={"one": 1})
        assert encode_body(spec).content == b'{"one":1}'

    def test_octet_stream(self):
        """APPLICATION_OCTET_STREAM uses the binary encoder."""
        spec = make_spec(content_type=HttpContentType.APPLICATION_OCTET_STREAM, payload=b"\x00")
        assert encode_body(spec).content == b"\x00"

    def test_multipart(self):
        """MULTIPART_FORM_DATA uses the multipart encoder."""
        spec = make_spec(content_type=HttpContentType.MULTIPART_FORM_DATA, params={"one": 1})
        body = encode_body(spec)
        assert body.content_type.startswith("multipart/form-data; boundary=*****")
