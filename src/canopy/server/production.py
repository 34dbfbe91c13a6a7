"""Production server.

Starts a multi-worker pounce server.  No reload, structured logs.
"""

from __future__ import annotations


def run_production_server(
    app: object,
    host: str = "0.0.0.0",
    port: int = 8000,
    workers: int = 0,
    *,
    log_level: str = "info",
) -> None:
    """Run a canopy app under pounce with multiple workers.

    Args:
        app: Canopy App instance.
        host: Bind address.
        port: Bind port.
        workers: Worker count (0 = auto-detect from CPU count).
        log_level: pounce log level (debug, info, warning, error, critical).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
    )
    Server(config, app).run()
