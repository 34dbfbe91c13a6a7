"""``canopy run``: start the development or production server."""

import argparse
import logging

from canopy.cli._resolve import load_app


def run_server(args: argparse.Namespace) -> None:
    """Load ``args.app`` and serve it.

    ``--debug`` or ``config.debug`` picks the reloading dev server,
    anything else the multi-worker production server.  Flags given on
    the command line win over the app's config.
    """
    app = load_app(args.app)
    config = app.config

    if not args.log_level:
        logging.basicConfig(
            level=config.log_level.upper(),
            format="%(levelname)s %(name)s: %(message)s",
        )

    host = args.host or config.host
    port = args.port or config.port

    if args.debug or config.debug:
        from canopy.server.dev import run_dev_server

        run_dev_server(app, host, port, reload=True, app_path=args.app)
        return

    from canopy.server.production import run_production_server

    run_production_server(
        app,
        host=host,
        port=port,
        workers=config.workers if args.workers is None else args.workers,
        log_level=args.log_level or config.log_level,
    )
