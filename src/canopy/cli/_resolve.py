"""Turn an ``APP`` argument into a ready-to-serve App.

``module:attribute`` names the app; the attribute defaults to ``app``
and may be a zero-argument factory.  ``load_app`` also freezes the app,
so broken routes or pages are reported by the CLI instead of on the
first request.
"""

import importlib
import sys

from canopy.app import App
from canopy.errors import CanopyError

# Everything importing a user module or freezing its app can raise
_LOAD_ERRORS = (
    ImportError,
    AttributeError,
    TypeError,
    ValueError,
    FileNotFoundError,
    CanopyError,
)


def resolve_app(import_string: str) -> App:
    """Import *import_string* and return the App it names.

    Raises:
        ImportError: The module cannot be imported.
        ValueError: The module part is empty.
        AttributeError: The module has no such attribute.
        TypeError: The attribute is not an App and is not a factory
            returning one, or the factory raised.
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or "app")

    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        return target
    msg = f"{import_string!r} resolved to {type(target).__name__}, not a canopy.App instance"
    raise TypeError(msg)


def load_app(import_string: str) -> App:
    """Resolve and freeze *import_string*, exiting with status 1 on failure."""
    try:
        app = resolve_app(import_string)
        app._ensure_frozen()
    except _LOAD_ERRORS as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return app
