"""Tests for canopy.http.response — immutable Response."""

from canopy.http.response import Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response("hi")
        assert r.status == 200
        assert r.content_type == "text/html; charset=utf-8"
        assert r.headers == ()

    def test_with_status_returns_new(self) -> None:
        r = Response("x")
        r2 = r.with_status(404)
        assert r.status == 200
        assert r2.status == 404

    def test_with_header_chains(self) -> None:
        r = Response("x").with_header("X-A", "1").with_header("X-B", "2")
        assert r.headers == (("X-A", "1"), ("X-B", "2"))

    def test_header_lookup_case_insensitive(self) -> None:
        r = Response("x").with_header("HX-Retarget", "body")
        assert r.header("hx-retarget") == "body"
        assert r.header("x-missing") is None

    def test_body_conversions(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"abc").text == "abc"
