"""``canopy routes``: print the route table of an app."""

import argparse

from canopy.cli._resolve import load_app
from canopy.routing.route import Route

_HEADER = ("METHOD", "PATH", "HANDLER")
_MAX_RULE = 80


def _row(route: Route) -> tuple[str, str, str]:
    handler = getattr(route.handler, "__name__", repr(route.handler))
    if route.name:
        handler = f"{handler} ({route.name})"
    return ", ".join(sorted(route.methods)), route.path, handler


def run_routes(args: argparse.Namespace) -> None:
    """Print one METHOD / PATH / HANDLER line per route, sorted by path."""
    app = load_app(args.app)
    assert app._router is not None

    rows = [_row(route) for route in sorted(app._router.routes, key=lambda r: r.path)]
    if not rows:
        print("No routes registered.")
        return

    widths = [max(len(cell) for cell in column) for column in zip(_HEADER, *rows)]
    for index, cells in enumerate([_HEADER, *rows]):
        # Last column is left unpadded
        print("  ".join(cell.ljust(w) for cell, w in zip(cells[:-1], widths)) + "  " + cells[-1])
        if index == 0:
            print("-" * min(sum(widths) + 4, _MAX_RULE))
