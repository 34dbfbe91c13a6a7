"""canopy — filesystem-routed pages with nested layouts.

A small ASGI page framework: a ``pages/`` directory defines the URL
space, ``_layout.html`` files nest around every page beneath them, and a
global error boundary stands in for any page that fails to render.

Basic usage::

    from canopy import App, AppConfig

    app = App(AppConfig(pages_dir="pages"))
    app.mount_pages()
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CanopyError",
    "ConfigurationError",
    "ErrorBoundary",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "Page",
    "Request",
    "Response",
    "Template",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import canopy`` fast while providing a clean top-level API.
    """
    if name == "App":
        from canopy.app import App

        return App

    if name == "AppConfig":
        from canopy.config import AppConfig

        return AppConfig

    if name == "Request":
        from canopy.http.request import Request

        return Request

    if name == "Response":
        from canopy.http.response import Response

        return Response

    if name in ("Page", "Template"):
        from canopy.templating import returns as _returns

        return getattr(_returns, name)

    if name == "ErrorBoundary":
        from canopy.server.boundary import ErrorBoundary

        return ErrorBoundary

    if name in ("CanopyError", "ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound"):
        from canopy import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
