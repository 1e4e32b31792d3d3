"""Tests for URL building and placeholder substitution."""

from __future__ import annotations

import httpx
import pytest

from sdkbuilder.client.urls import build_url, encode_component, join_path, stringify, substitute


class TestStringify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, ""), (True, "true"), (False, "false"), (2, "2"), (1.5, "1.5"), ("a", "a")],
    )
    def test_values(self, value: object, expected: str) -> None:
        assert stringify(value) == expected


class TestEncodeComponent:
    def test_reserved_characters_are_escaped(self) -> None:
        assert encode_component("a/b c?d") == "a%2Fb%20c%3Fd"

    def test_unreserved_marks_are_kept(self) -> None:
        assert encode_component("a-b_c.d!e~f*g'h(i)") == "a-b_c.d!e~f*g'h(i)"

    def test_unicode(self) -> None:
        assert encode_component("é") == "%C3%A9"


class TestJoinPath:
    @pytest.mark.parametrize(
        ("base", "template"),
        [("/api", "/users"), ("/api/", "/users"), ("/api", "users"), ("/api/", "users")],
    )
    def test_exactly_one_slash(self, base: str, template: str) -> None:
        assert join_path(base, template) == "/api/users"

    def test_root_base(self) -> None:
        assert join_path("", "/users") == "/users"


class TestSubstitute:
    def test_no_params(self) -> None:
        assert substitute("/users/:id", None) == "/users/:id"

    def test_scalar_replaces_first_placeholder(self) -> None:
        assert substitute("/users/:id/posts/:post", 2) == "/users/2/posts/:post"

    def test_mapping_replaces_every_occurrence(self) -> None:
        assert substitute("/a/:id/b/:id", {"id": 3}) == "/a/3/b/3"

    def test_mapping_does_not_replace_longer_names(self) -> None:
        assert substitute("/u/:id/:idx", {"id": 1}) == "/u/1/:idx"

    def test_unmatched_placeholder_left_literal(self) -> None:
        assert substitute("/users/:id", {"other": 1}) == "/users/:id"

    def test_none_value_becomes_empty(self) -> None:
        assert substitute("/users/:id", {"id": None}) == "/users/"

    def test_values_are_percent_encoded(self) -> None:
        assert substitute("/files/:name", {"name": "a b/c"}) == "/files/a%20b%2Fc"


class TestBuildUrl:
    def test_base_path_is_kept(self) -> None:
        url = build_url(httpx.URL("http://h/api"), "/users/:id", 2)
        assert str(url) == "http://h/api/users/2"

    def test_trailing_slash_on_base(self) -> None:
        url = build_url(httpx.URL("https://h/api/"), "/users")
        assert str(url) == "https://h/api/users"

    def test_port_is_kept(self) -> None:
        url = build_url(httpx.URL("http://localhost:8080"), "/users/:id", {"id": "x"})
        assert str(url) == "http://localhost:8080/users/x"

    def test_base_query_is_kept(self) -> None:
        url = build_url(httpx.URL("http://h/api?key=1"), "/users")
        assert url.path == "/api/users"
        assert url.params["key"] == "1"

    def test_encoded_value_survives(self) -> None:
        url = build_url(httpx.URL("http://h"), "/files/:name", {"name": "a b"})
        assert url.raw_path == b"/files/a%20b"
