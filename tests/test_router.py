"""Tests for canopy.routing.router — compiled trie-based router."""

import pytest

from canopy.errors import ConfigurationError, MethodNotAllowed, NotFound
from canopy.routing.route import Route
from canopy.routing.router import Router, parse_path


def _handler() -> str:
    return "ok"


def _route(path: str, methods: frozenset[str] | None = None) -> Route:
    return Route(path=path, handler=_handler, methods=methods or frozenset({"GET"}))


def _router(*routes: Route) -> Router:
    r = Router()
    for route in routes:
        r.add(route)
    r.compile()
    return r


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/dashboard/users")
        assert [s.value for s in segments] == ["dashboard", "users"]
        assert not any(s.is_param for s in segments)

    def test_param(self) -> None:
        segments = parse_path("/dashboard/users/{id}")
        assert segments[2].is_param is True
        assert segments[2].param_name == "id"
        assert segments[2].param_type == "str"

    def test_typed_param(self) -> None:
        segments = parse_path("/users/{id:int}")
        assert segments[1].param_type == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_angle_param(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_path("/users/<id>")
        assert "{param}" in str(exc_info.value)

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="uuid"):
            parse_path("/users/{id:uuid}")


class TestRouterMatching:
    def test_root(self) -> None:
        match = _router(_route("/")).match("GET", "/")
        assert match.path_params == {}

    def test_static_path(self) -> None:
        match = _router(_route("/dashboard/users")).match("GET", "/dashboard/users")
        assert match.route.path == "/dashboard/users"

    def test_trailing_slash_ignored(self) -> None:
        match = _router(_route("/dashboard/users")).match("GET", "/dashboard/users/")
        assert match.route.path == "/dashboard/users"

    def test_param_captured_as_string(self) -> None:
        match = _router(_route("/dashboard/users/{id}")).match("GET", "/dashboard/users/42")
        assert match.path_params == {"id": "42"}

    def test_any_segment_matches_str_param(self) -> None:
        match = _router(_route("/dashboard/users/{id}")).match("GET", "/dashboard/users/abc-9")
        assert match.path_params == {"id": "abc-9"}

    def test_param_does_not_span_segments(self) -> None:
        with pytest.raises(NotFound):
            _router(_route("/users/{id}")).match("GET", "/users/1/extra")

    def test_int_converter_rejects_text(self) -> None:
        with pytest.raises(NotFound):
            _router(_route("/items/{n:int}")).match("GET", "/items/abc")

    def test_float_converter(self) -> None:
        r = _router(_route("/p/{x:float}"))
        assert r.match("GET", "/p/1.5").path_params == {"x": "1.5"}
        assert r.match("GET", "/p/2").path_params == {"x": "2"}
        for bad in ("/p/x", "/p/1.", "/p/1.5.2"):
            with pytest.raises(NotFound):
                r.match("GET", bad)

    def test_static_beats_param(self) -> None:
        static = _route("/users/new")
        r = _router(_route("/users/{id}"), static)
        assert r.match("GET", "/users/new").route is static
        assert r.match("GET", "/users/7").path_params == {"id": "7"}

    def test_catch_all(self) -> None:
        match = _router(_route("/files/{rest:path}")).match("GET", "/files/a/b/c.txt")
        assert match.path_params == {"rest": "a/b/c.txt"}

    def test_not_found(self) -> None:
        with pytest.raises(NotFound):
            _router(_route("/users")).match("GET", "/posts")

    def test_prefix_without_route_is_not_found(self) -> None:
        with pytest.raises(NotFound):
            _router(_route("/dashboard/users")).match("GET", "/dashboard")


class TestRouterMethods:
    def test_method_not_allowed_lists_allowed(self) -> None:
        r = _router(_route("/users", frozenset({"GET", "POST"})))
        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("DELETE", "/users")
        assert exc_info.value.status == 405
        assert ("Allow", "GET, POST") in exc_info.value.headers

    def test_head_falls_back_to_get(self) -> None:
        route = _route("/users")
        assert _router(route).match("HEAD", "/users").route is route

    def test_separate_handlers_per_method(self) -> None:
        get = _route("/users", frozenset({"GET"}))
        post = _route("/users", frozenset({"POST"}))
        r = _router(get, post)
        assert r.match("GET", "/users").route is get
        assert r.match("POST", "/users").route is post


class TestRouterRegistration:
    def test_add_after_compile_raises(self) -> None:
        r = _router()
        with pytest.raises(RuntimeError):
            r.add(_route("/late"))

    def test_conflicting_param_names_raise(self) -> None:
        r = Router()
        r.add(_route("/users/{id}"))
        with pytest.raises(ConfigurationError, match="user_id"):
            r.add(_route("/users/{user_id}/posts"))

    def test_routes_lists_each_once(self) -> None:
        both = _route("/users", frozenset({"GET", "HEAD"}))
        r = _router(_route("/"), both, _route("/users/{id}"))
        paths = sorted(route.path for route in r.routes)
        assert paths == ["/", "/users", "/users/{id}"]
