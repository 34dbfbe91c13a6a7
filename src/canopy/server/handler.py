"""ASGI handler — translates ASGI scope/messages to canopy types.

The only component that touches raw ASGI HTTP messages. Converts the
scope to a Request, dispatches through the router, renders the result,
and sends the Response back through ASGI send().  The try block around
dispatch and render is the global error boundary's catch point.
"""

from collections.abc import Callable
from typing import Any

from kida import Environment

from canopy._internal.asgi import Receive, Scope, Send
from canopy._internal.invoke import invoke
from canopy.errors import HTTPError
from canopy.http.request import Request
from canopy.http.response import Response
from canopy.pages.resolve import resolve_kwargs
from canopy.routing.router import Router
from canopy.server.boundary import ErrorBoundary
from canopy.server.errors import handle_http_error, handle_internal_error
from canopy.server.negotiation import negotiate
from canopy.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    error_handlers: dict[int | type, Callable[..., Any]],
    boundary: ErrorBoundary,
    kida_env: Environment | None = None,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    try:
        response = await _dispatch(request, router=router, kida_env=kida_env)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, kida_env)
    except Exception as exc:
        response = await handle_internal_error(
            exc, request, error_handlers, kida_env, boundary, debug
        )

    await send_response(response, send, head=request.method == "HEAD")


async def _dispatch(
    request: Request,
    *,
    router: Router,
    kida_env: Environment | None,
) -> Response:
    """Match, call the handler, and render its result.

    Rendering happens here, inside the caller's try block, so template
    and layout failures reach the boundary like handler failures do.
    """
    match = router.match(request.method, request.path)
    request = request.with_path_params(match.path_params)

    handler = match.route.handler
    kwargs = resolve_kwargs(handler, request)
    result = await invoke(handler, **kwargs)

    return negotiate(result, kida_env=kida_env, request=request)
