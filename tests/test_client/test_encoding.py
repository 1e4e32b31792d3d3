"""Tests for payload encoding: query strings, JSON bodies, multipart bodies."""

from __future__ import annotations

import io
import json

import httpx
import pytest

from sdkbuilder.client.encoding import (
    JSON_CONTENT_TYPE,
    contains_file,
    dump_json,
    encode_payload,
    flatten_multipart,
)
from sdkbuilder.client.forms import MULTIPART_ENCTYPE, FileUpload, FormData
from sdkbuilder.models import HTTPMethod

URL = httpx.URL("http://h/api/items")


# ---------------------------------------------------------------------------
# Empty payloads
# ---------------------------------------------------------------------------


class TestEmptyPayload:
    @pytest.mark.parametrize("payload", [None, {}, "", b"", FormData()])
    @pytest.mark.parametrize("method", list(HTTPMethod))
    def test_no_body_and_no_query(self, method: HTTPMethod, payload: object) -> None:
        encoded = encode_payload(method, URL, payload)
        assert encoded.url == URL
        assert encoded.content is None
        assert encoded.files == []
        assert encoded.send_kwargs() == {}


# ---------------------------------------------------------------------------
# GET / DELETE
# ---------------------------------------------------------------------------


class TestQueryEncoding:
    def test_scalars_become_query_params(self) -> None:
        encoded = encode_payload(HTTPMethod.GET, URL, {"q": "hi", "page": 2})
        assert encoded.url.params["q"] == "hi"
        assert encoded.url.params["page"] == "2"
        assert encoded.content is None

    def test_lists_repeat_the_key(self) -> None:
        encoded = encode_payload(HTTPMethod.GET, URL, {"tags": ["a", "b"], "q": "hi"})
        assert encoded.url.params.get_list("tags") == ["a", "b"]
        assert encoded.url.query == b"tags=a&tags=b&q=hi"

    def test_none_values_are_skipped(self) -> None:
        encoded = encode_payload(HTTPMethod.DELETE, URL, {"a": None, "b": "1"})
        assert "a" not in encoded.url.params
        assert encoded.url.params["b"] == "1"

    def test_booleans(self) -> None:
        encoded = encode_payload(HTTPMethod.GET, URL, {"active": True})
        assert encoded.url.params["active"] == "true"

    def test_nested_mapping_is_json_encoded(self) -> None:
        encoded = encode_payload(HTTPMethod.GET, URL, {"filter": {"a": 1}})
        assert json.loads(encoded.url.params["filter"]) == {"a": 1}

    def test_existing_query_is_kept(self) -> None:
        url = httpx.URL("http://h/api/items?key=1")
        encoded = encode_payload(HTTPMethod.GET, url, {"q": "x"})
        assert encoded.url.query == b"key=1&q=x"

    def test_form_text_fields_become_query(self) -> None:
        form = FormData([("q", "hi"), ("file", FileUpload("a.txt", b"x"))])
        encoded = encode_payload(HTTPMethod.GET, URL, form)
        assert encoded.url.query == b"q=hi"

    def test_string_payload_is_ignored_for_get(self) -> None:
        encoded = encode_payload(HTTPMethod.GET, URL, "raw")
        assert encoded.url == URL
        assert encoded.content is None


# ---------------------------------------------------------------------------
# Body methods
# ---------------------------------------------------------------------------


class TestJsonBody:
    @pytest.mark.parametrize("method", [HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH])
    def test_mapping_is_compact_json(self, method: HTTPMethod) -> None:
        encoded = encode_payload(method, URL, {"name": "x"})
        assert encoded.content == b'{"name":"x"}'
        assert encoded.headers == {"Content-Type": JSON_CONTENT_TYPE}
        assert encoded.url == URL

    def test_unicode_is_not_escaped(self) -> None:
        assert dump_json({"name": "é"}) == '{"name":"é"}'.encode("utf-8")

    def test_json_string_is_sent_verbatim_and_tagged(self) -> None:
        encoded = encode_payload(HTTPMethod.POST, URL, '{"a": 1}')
        assert encoded.content == b'{"a": 1}'
        assert encoded.headers == {"Content-Type": JSON_CONTENT_TYPE}

    def test_plain_string_is_untagged(self) -> None:
        encoded = encode_payload(HTTPMethod.POST, URL, "hello")
        assert encoded.content == b"hello"
        assert encoded.headers == {}

    def test_bytes_are_sent_verbatim(self) -> None:
        encoded = encode_payload(HTTPMethod.PUT, URL, b"\x00\x01")
        assert encoded.content == b"\x00\x01"
        assert encoded.headers == {}

    def test_form_without_files_is_json(self) -> None:
        form = FormData([("name", "Ann"), ("tag", "a"), ("tag", "b")])
        encoded = encode_payload(HTTPMethod.POST, URL, form)
        assert json.loads(encoded.content) == {"name": "Ann", "tag": ["a", "b"]}


class TestMultipartBody:
    def test_file_in_mapping_switches_to_multipart(self) -> None:
        upload = FileUpload("a.png", b"PNG", "image/png")
        encoded = encode_payload(HTTPMethod.POST, URL, {"title": "t", "file": upload})
        assert encoded.is_multipart
        assert encoded.content is None
        assert "Content-Type" not in encoded.headers
        assert encoded.files == [
            ("title", (None, "t")),
            ("file", ("a.png", b"PNG", "image/png")),
        ]

    def test_nested_file_uses_bracket_keys(self) -> None:
        upload = FileUpload("a.txt", b"x")
        payload = {"user": {"name": "n", "docs": [upload], "age": 3, "skip": None}}
        encoded = encode_payload(HTTPMethod.POST, URL, payload)
        assert encoded.files == [
            ("user[name]", (None, "n")),
            ("user[docs][0]", ("a.txt", b"x")),
            ("user[age]", (None, "3")),
        ]

    def test_binary_stream_counts_as_file(self) -> None:
        stream = io.BytesIO(b"data")
        assert contains_file({"a": [{"b": stream}]})
        encoded = encode_payload(HTTPMethod.PUT, URL, {"blob": stream})
        assert encoded.files[0][0] == "blob"
        assert encoded.files[0][1][0] == "upload"

    def test_multipart_form_without_file(self) -> None:
        form = FormData([("name", "x")], enctype=MULTIPART_ENCTYPE)
        encoded = encode_payload(HTTPMethod.POST, URL, form)
        assert encoded.files == [("name", (None, "x"))]

    def test_form_with_file_is_multipart(self) -> None:
        form = FormData([("name", "x"), ("avatar", FileUpload("me.png", b"img"))])
        encoded = encode_payload(HTTPMethod.POST, URL, form)
        assert encoded.send_kwargs() == {
            "files": [("name", (None, "x")), ("avatar", ("me.png", b"img"))]
        }

    def test_form_with_empty_file_stays_json(self) -> None:
        form = FormData([("name", "x"), ("avatar", FileUpload("", b""))])
        encoded = encode_payload(HTTPMethod.POST, URL, form)
        assert encoded.content is not None
        assert json.loads(encoded.content)["name"] == "x"


class TestFlattenMultipart:
    def test_flat_mapping(self) -> None:
        assert flatten_multipart({"a": 1, "b": True}) == [("a", "1"), ("b", "true")]

    def test_deep_nesting(self) -> None:
        assert flatten_multipart({"a": {"b": {"c": "d"}}}) == [("a[b][c]", "d")]

    def test_contains_file_false_for_plain_data(self) -> None:
        assert not contains_file({"a": [1, {"b": "c"}]})
