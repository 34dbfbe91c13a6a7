"""Canopy application class.

Mutable during setup (route registration, error handlers, pages).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from kida import Environment

from canopy._internal.asgi import Receive, Scope, Send
from canopy._internal.invoke import invoke
from canopy._internal.types import ErrorHandler, Handler
from canopy.config import AppConfig
from canopy.http.request import Request
from canopy.pages.types import LayoutChain
from canopy.routing.route import Route
from canopy.routing.router import Router
from canopy.server.boundary import ErrorBoundary
from canopy.server.handler import handle_request
from canopy.templating.integration import create_environment

logger = logging.getLogger("canopy.server")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The canopy application.

    Mutable during setup (route registration, error handlers, pages).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first
    invoked.

    Thread safety:
        Setup is single-threaded (decorators at import time).  The freeze
        transition uses a Lock + double-check so exactly one thread
        compiles the app even when several workers take their first
        request at once.
    """

    __slots__ = (
        "_boundary",
        "_error_handlers",
        "_error_template",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_pending_routes",
        "_router",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._error_template: str | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._kida_env: Environment | None = None
        self._boundary: ErrorBoundary = ErrorBoundary()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name, shown by ``canopy routes``.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    # -- Filesystem page routing --

    def mount_pages(self, pages_dir: str | Path | None = None) -> None:
        """Mount a filesystem-based pages directory.

        Registers a route for every ``page.py``, handler ``.py`` file, and
        template-only ``page.html``, each wrapped in the ``_layout.html``
        files above it.  A root ``_error.html`` becomes the global error
        boundary template.

        Args:
            pages_dir: Path to the pages directory.  Defaults to
                ``config.pages_dir``; when given, it replaces that setting
                so templates resolve against the same root.
        """
        from canopy.pages.discovery import discover_error_template, discover_pages

        self._check_not_frozen()

        if pages_dir is not None:
            self.config = replace(self.config, pages_dir=pages_dir)

        for page_route in discover_pages(self.config.pages_dir):
            self._register_page_handler(
                url_path=page_route.url_path,
                handler=page_route.handler,
                methods=list(page_route.methods),
                layout_chain=page_route.layout_chain,
                template_name=page_route.template_name,
            )

        self._error_template = discover_error_template(self.config.pages_dir)

    def _register_page_handler(
        self,
        *,
        url_path: str,
        handler: Handler,
        methods: list[str],
        layout_chain: LayoutChain,
        template_name: str | None,
    ) -> None:
        """Register one page handler behind a wrapper that binds its layouts."""
        from canopy.pages.resolve import resolve_kwargs, upgrade_result

        async def page_wrapper(request: Request) -> Any:
            kwargs = resolve_kwargs(handler, request)
            result = await invoke(handler, **kwargs)
            return upgrade_result(result, layout_chain, template_name)

        page_wrapper.__name__ = getattr(handler, "__name__", "page")

        self._pending_routes.append(_PendingRoute(url_path, page_wrapper, methods, name=None))

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        A handler for ``500`` or for an exception type takes precedence
        over the global error boundary.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the server: dev (reload) when ``config.debug``, else production."""
        self._ensure_frozen()

        _host = host or self.config.host
        _port = port or self.config.port

        if self.config.debug:
            from canopy.server.dev import run_dev_server

            run_dev_server(self, _host, _port, reload=True)
        else:
            from canopy.server.production import run_production_server

            run_production_server(
                self,
                host=_host,
                port=_port,
                workers=self.config.workers,
                log_level=self.config.log_level,
            )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            error_handlers=self._error_handlers,
            boundary=self._boundary,
            kida_env=self._kida_env,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup so configuration errors surface before
        the first request.
        """
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(Route(pending.path, pending.handler, methods, pending.name))
        router.compile()
        self._router = router

        if Path(self.config.pages_dir).is_dir():
            self._kida_env = create_environment(self.config)
        self._boundary = ErrorBoundary(self._error_template)

        self._frozen = True
        logger.debug("Compiled %d routes", len(router.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, error handlers, and pages before calling app.run()."
            )
            raise RuntimeError(msg)
