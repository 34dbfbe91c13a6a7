"""Tests for the global error boundary.

Covers the built-in fallback markup, the pages-root ``_error.html``
override, handler precedence, and retrying a failed page.
"""

import logging
from pathlib import Path

import pytest

from canopy import App, AppConfig, ErrorBoundary, NotFound, Request
from canopy.http.headers import Headers
from canopy.http.query import QueryParams
from canopy.server.boundary import (
    FALLBACK_HEADING,
    RETRY_LABEL,
    boundary_context,
    render_fallback,
)
from canopy.testing import TestClient


def _request(path: str = "/broken", query: bytes = b"", hx: bool = False) -> Request:
    headers = ((b"hx-request", b"true"),) if hx else ()
    return Request(
        method="GET",
        path=path,
        raw_path=path,
        headers=Headers(headers),
        query=QueryParams(query),
        path_params={},
        http_version="1.1",
        server=None,
        client=None,
    )


def _failing_app(config: AppConfig | None = None) -> App:
    app = App(config)

    @app.route("/broken")
    def broken():
        raise ValueError("database unavailable")

    return app


class TestBoundaryContext:
    def test_fields(self) -> None:
        ctx = boundary_context(ValueError("boom"), _request(query=b"a=1&a=2"), debug=False)
        assert ctx["message"] == "boom"
        assert ctx["error_type"] == "ValueError"
        assert ctx["retry_path"] == "/broken"
        assert ctx["retry_params"] == [("a", "1"), ("a", "2")]
        assert ctx["traceback"] is None

    def test_debug_adds_traceback(self) -> None:
        try:
            raise KeyError("missing")
        except KeyError as exc:
            ctx = boundary_context(exc, _request(), debug=True)
        assert ctx["traceback"].startswith("KeyError")


class TestRenderFallback:
    def test_contains_heading_message_and_retry(self) -> None:
        html = render_fallback(boundary_context(ValueError("boom"), _request(), debug=False))
        assert f"<h2>{FALLBACK_HEADING}</h2>" in html
        assert "<p>boom</p>" in html
        assert '<form method="get" action="/broken">' in html
        assert f">{RETRY_LABEL}</button>" in html

    def test_message_is_escaped(self) -> None:
        html = render_fallback(
            boundary_context(ValueError("<script>x</script>"), _request(), debug=False)
        )
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt;" in html

    def test_query_replayed_as_hidden_inputs(self) -> None:
        html = render_fallback(
            boundary_context(ValueError("x"), _request(query=b"page=2&q=a+b"), debug=False)
        )
        assert '<input type="hidden" name="page" value="2">' in html
        assert '<input type="hidden" name="q" value="a b">' in html

    def test_empty_message_still_renders(self) -> None:
        html = render_fallback(boundary_context(ValueError(), _request(), debug=False))
        assert FALLBACK_HEADING in html
        assert "<p></p>" in html


class TestErrorBoundaryRender:
    def test_status_500_html(self) -> None:
        response = ErrorBoundary().render(ValueError("x"), _request(), None)
        assert response.status == 500
        assert response.content_type.startswith("text/html")

    def test_fragment_request_retargets_body(self) -> None:
        response = ErrorBoundary().render(ValueError("x"), _request(hx=True), None)
        assert response.header("HX-Retarget") == "body"
        assert response.header("HX-Reswap") == "innerHTML"

    def test_full_request_has_no_htmx_headers(self) -> None:
        response = ErrorBoundary().render(ValueError("x"), _request(), None)
        assert response.header("HX-Retarget") is None


class TestBoundaryInPipeline:
    async def test_unhandled_error_renders_fallback(self) -> None:
        async with TestClient(_failing_app()) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert FALLBACK_HEADING in response.text
        assert "database unavailable" in response.text
        assert RETRY_LABEL in response.text

    async def test_error_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="canopy.server"):
            async with TestClient(_failing_app()) as client:
                await client.get("/broken")
        assert any("500 GET /broken" in r.getMessage() for r in caplog.records)

    async def test_debug_shows_traceback(self) -> None:
        async with TestClient(_failing_app(AppConfig(debug=True))) as client:
            response = await client.get("/broken")
        assert "canopy-traceback" in response.text

    async def test_production_hides_traceback(self) -> None:
        async with TestClient(_failing_app()) as client:
            response = await client.get("/broken")
        assert "canopy-traceback" not in response.text

    async def test_http_errors_bypass_boundary(self) -> None:
        app = App()

        @app.route("/users/{id}")
        def user(id: str):
            raise NotFound("no such user")

        async with TestClient(app) as client:
            response = await client.get("/users/1")
        assert response.status == 404
        assert FALLBACK_HEADING not in response.text

    async def test_registered_500_handler_wins(self) -> None:
        app = _failing_app()

        @app.error(500)
        def server_error(request: Request, exc: Exception):
            return f"custom: {exc}"

        async with TestClient(app) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert response.text == "custom: database unavailable"

    async def test_exception_type_handler_wins(self) -> None:
        app = _failing_app()

        @app.error(ValueError)
        async def value_error():
            return "bad value", 422

        async with TestClient(app) as client:
            response = await client.get("/broken")
        assert response.status == 422

    async def test_retry_action_keeps_encoded_path(self) -> None:
        app = App()
        seen: list[str] = []

        @app.route("/items/{id}")
        def item(id: str):
            seen.append(id)
            raise RuntimeError("render failed")

        async with TestClient(app) as client:
            failed = await client.get("/items/a%3Fb%23c")
            assert '<form method="get" action="/items/a%3Fb%23c">' in failed.text

            # The form action leads back to the same id
            await client.get("/items/a%3Fb%23c")
        assert seen == ["a?b#c", "a?b#c"]

    async def test_retry_reissues_request(self) -> None:
        app = App()
        attempts = {"count": 0}

        @app.route("/flaky")
        def flaky(request: Request):
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise RuntimeError("transient")
            return f"ok {request.query.get('page')}"

        async with TestClient(app) as client:
            failed = await client.get("/flaky?page=3")
            assert failed.status == 500
            assert 'action="/flaky"' in failed.text
            assert 'name="page" value="3"' in failed.text

            # Submitting the retry form is a GET to the same path and query
            retried = await client.get("/flaky?page=3")
        assert retried.status == 200
        assert retried.text == "ok 3"


class TestBoundaryTemplate:
    def _pages(self, tmp_path: Path, error_template: str) -> App:
        (tmp_path / "_layout.html").write_text(
            "<html><body><h1>Shell</h1>{% block content %}{% endblock %}</body></html>"
        )
        (tmp_path / "_error.html").write_text(error_template)
        (tmp_path / "broken").mkdir()
        (tmp_path / "broken" / "page.py").write_text(
            "def get():\n    raise RuntimeError('page exploded')\n"
        )
        app = App(AppConfig(pages_dir=tmp_path))
        app.mount_pages()
        return app

    async def test_custom_template_used(self, tmp_path: Path) -> None:
        app = self._pages(
            tmp_path,
            '<div class="oops">{{ error_type }}: {{ message }} '
            '<a href="{{ retry_path }}">again</a></div>',
        )
        async with TestClient(app) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert "RuntimeError: page exploded" in response.text
        assert 'href="/broken"' in response.text

    async def test_boundary_not_wrapped_in_layouts(self, tmp_path: Path) -> None:
        app = self._pages(tmp_path, "<p>{{ message }}</p>")
        async with TestClient(app) as client:
            response = await client.get("/broken")
        assert "<h1>Shell</h1>" not in response.text

    async def test_broken_template_falls_back(self, tmp_path: Path) -> None:
        app = self._pages(tmp_path, "{% include 'missing.html' %}")
        async with TestClient(app) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert FALLBACK_HEADING in response.text
        assert "page exploded" in response.text

    async def test_layout_failure_reaches_boundary(self, tmp_path: Path) -> None:
        (tmp_path / "_layout.html").write_text("{% include 'nope.html' %}")
        (tmp_path / "page.html").write_text("<p>home</p>")
        app = App(AppConfig(pages_dir=tmp_path))
        app.mount_pages()
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500
        assert FALLBACK_HEADING in response.text
