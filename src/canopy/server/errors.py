"""Error handling pipeline for canopy requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers, the global error boundary, or plain
defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from kida import Environment

from canopy.errors import HTTPError
from canopy.http.request import Request
from canopy.http.response import Response
from canopy.server.boundary import ErrorBoundary
from canopy.server.negotiation import negotiate
from canopy.server.terminal_errors import log_error

logger = logging.getLogger("canopy.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc)
    args, and may be sync or async.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result, kida_env=kida_env, request=request)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    response = Response(
        body=exc.detail or f"Error {exc.status}",
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    boundary: ErrorBoundary,
    debug: bool,
) -> Response:
    """Handle an unexpected exception as a 500.

    A registered handler for the exception type or for 500 wins;
    otherwise the global error boundary renders the fallback page.
    """
    log_error(exc, request)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        if response.status == 200:
            response = response.with_status(500)
        return response

    return boundary.render(exc, request, kida_env, debug=debug)
