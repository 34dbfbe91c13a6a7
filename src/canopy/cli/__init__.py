"""Canopy CLI — dev/production server and route listing.

Entry point registered as ``canopy`` in ``pyproject.toml``::

    [project.scripts]
    canopy = "canopy.cli:main"
"""

import argparse
import logging
import sys

DEFAULT_APP = "canopy.scaffold:app"


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``canopy`` command."""
    parser = argparse.ArgumentParser(
        prog="canopy",
        description="canopy — filesystem-routed pages with nested layouts.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (debug, info, warning, error). Defaults to the app config.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- canopy run -------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start dev or production server")
    run_parser.add_argument(
        "app",
        nargs="?",
        default=DEFAULT_APP,
        help=f"Import string (default: {DEFAULT_APP})",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Run the single-worker dev server with reload",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect, production only)",
    )

    # -- canopy routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument(
        "app",
        nargs="?",
        default=DEFAULT_APP,
        help=f"Import string (default: {DEFAULT_APP})",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.log_level:
        logging.basicConfig(
            level=args.log_level.upper(),
            format="%(levelname)s %(name)s: %(message)s",
        )

    if args.command == "run":
        from canopy.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from canopy.cli._routes import run_routes

        run_routes(args)
