"""Immutable HTTP request.

Frozen metadata parsed once from the ASGI scope.  Pages in this
framework only ever render from the path and headers, so the body is
never read.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import quote

from canopy.http.headers import Headers
from canopy.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path_params`` is empty until the router matches; the pipeline then
    swaps in a copy carrying the captured parameters.
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query: QueryParams
    path_params: Mapping[str, str]
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # -- htmx --

    @property
    def is_fragment(self) -> bool:
        """True if this is an htmx request (``HX-Request: true``)."""
        return self.headers.get("hx-request") == "true"

    @property
    def htmx_target(self) -> str | None:
        """The target element ID from the ``HX-Target`` header."""
        return self.headers.get("hx-target")

    @property
    def is_history_restore(self) -> bool:
        """True on an htmx history cache miss, which needs the full page."""
        return self.headers.get("hx-history-restore-request") == "true"

    def with_path_params(self, path_params: Mapping[str, str]) -> Request:
        """Return a copy carrying the router's captured parameters."""
        return replace(self, path_params=dict(path_params))

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Mapping[str, Any],
        path_params: Mapping[str, str] | None = None,
    ) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            raw_path=_raw_path(scope),
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params=dict(path_params or {}),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )


def _raw_path(scope: Mapping[str, Any]) -> str:
    """The path still percent-encoded, as the client sent it.

    ``scope["path"]`` is decoded, so ``/items/a%3Fb`` arrives as
    ``/items/a?b``.  Servers that omit ``raw_path`` get the decoded path
    re-quoted.
    """
    raw = scope.get("raw_path")
    if raw:
        return raw.decode("latin-1").partition("?")[0]
    return quote(scope["path"])
