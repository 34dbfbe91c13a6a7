"""Development server with hot reload.

Starts a pounce ASGI server with the live canopy App object, single
worker, reload enabled.
"""

from __future__ import annotations


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = True,
    app_path: str | None = None,
) -> None:
    """Start a pounce dev server with the given canopy App.

    Pounce's ``run()`` takes an import string, but canopy has a live
    ``App`` object, so ``pounce.Server`` is used directly.

    Args:
        app: ASGI callable (canopy App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes.
        app_path: Optional ``"module:attribute"`` import string.  When
            provided, pounce reimports the app on each reload so code
            changes on disk take effect.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        # Page templates and layouts live beside the page modules
        reload_include=(".html",),
    )
    server = Server(config, app, app_path=app_path)
    server.run()
