"""Global error boundary.

Any exception that escapes a page handler or the layout/template render
lands here.  The boundary replaces the whole document with a fixed
message, the error's own message, and a "Try again" control that
re-issues the failed request.

The markup comes from the pages root ``_error.html`` when there is one.
Its context:

- ``message``: ``str(exc)``
- ``error_type``: the exception class name
- ``retry_path``: the failed request's path, still percent-encoded
- ``retry_params``: the failed request's query as ``(name, value)`` pairs
- ``traceback``: compact traceback text in debug mode, else ``None``

Without a template, or if the template itself fails, the built-in
fallback below renders the same contract.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Any

from kida import Environment

from canopy.http.request import Request
from canopy.http.response import Response
from canopy.server.terminal_errors import format_compact_traceback

logger = logging.getLogger("canopy.server")

FALLBACK_HEADING = "Something went wrong globally!"
RETRY_LABEL = "Try again"


def boundary_context(exc: BaseException, request: Request, *, debug: bool) -> dict[str, Any]:
    """Template context describing the failure and how to retry it."""
    return {
        "message": str(exc),
        "error_type": type(exc).__name__,
        "retry_path": request.raw_path,
        "retry_params": list(request.query.items_multi()),
        "traceback": format_compact_traceback(exc) if debug else None,
    }


def render_fallback(context: dict[str, Any]) -> str:
    """Built-in boundary markup, used when no ``_error.html`` renders."""
    esc = html.escape
    hidden = "".join(
        f'<input type="hidden" name="{esc(name)}" value="{esc(value)}">'
        for name, value in context["retry_params"]
    )
    trace = ""
    if context.get("traceback"):
        trace = f'\n    <pre class="canopy-traceback">{esc(context["traceback"])}</pre>'
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "  <body>\n"
        f"    <h2>{FALLBACK_HEADING}</h2>\n"
        f"    <p>{esc(context['message'])}</p>\n"
        f'    <form method="get" action="{esc(context["retry_path"])}">'
        f'{hidden}<button type="submit">{RETRY_LABEL}</button></form>'
        f"{trace}\n"
        "  </body>\n"
        "</html>\n"
    )


@dataclass(frozen=True, slots=True)
class ErrorBoundary:
    """Renders the fallback page for unhandled render failures.

    Attributes:
        template_name: Boundary template relative to the pages root, or
            ``None`` for the built-in markup.
    """

    template_name: str | None = None

    def render(
        self,
        exc: BaseException,
        request: Request,
        kida_env: Environment | None,
        *,
        debug: bool = False,
    ) -> Response:
        """Produce the 500 response that stands in for the failed page."""
        context = boundary_context(exc, request, debug=debug)
        body = self._render_body(context, kida_env)
        response = Response(body=body, status=500)
        if request.is_fragment:
            # The boundary replaces the document, not the swapped fragment
            response = (
                response
                .with_header("HX-Retarget", "body")
                .with_header("HX-Reswap", "innerHTML")
                .with_header("HX-Trigger", "canopyError")
            )
        return response

    def _render_body(self, context: dict[str, Any], kida_env: Environment | None) -> str:
        if self.template_name is None or kida_env is None:
            return render_fallback(context)
        try:
            return kida_env.get_template(self.template_name).render(context)
        except Exception:
            logger.exception("Error boundary template %s failed to render", self.template_name)
            return render_fallback(context)
