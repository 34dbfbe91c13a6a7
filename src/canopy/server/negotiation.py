"""Content negotiation — maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

from __future__ import annotations

import json as json_module
from typing import TYPE_CHECKING, Any

from kida import Environment

from canopy.errors import ConfigurationError
from canopy.http.response import Response
from canopy.pages.renderer import render_with_layouts
from canopy.pages.types import LayoutChain
from canopy.templating.integration import render_template
from canopy.templating.returns import LayoutPage, Page, Template

if TYPE_CHECKING:
    from canopy.http.request import Request


def negotiate(
    value: Any,
    *,
    kida_env: Environment | None = None,
    request: Request | None = None,
) -> Response:
    """Convert a handler's return value to a Response.

    Dispatch order:

    1. ``Response``           -> pass through
    2. ``LayoutPage``         -> page template wrapped in its layouts
    3. ``Page``               -> named page template, no layouts
    4. ``Template``           -> render via kida
    5. ``str``                -> 200, text/html
    6. ``bytes``              -> 200, application/octet-stream
    7. ``dict`` / ``list``    -> 200, application/json
    8. ``(value, int)``       -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case LayoutPage():
            env = _require_env(kida_env, "LayoutPage")
            return Response(body=_render_layout_page(value, env, request))
        case Page():
            env = _require_env(kida_env, "Page")
            if value.name is None:
                msg = "Page() outside a pages directory needs a template name."
                raise ConfigurationError(msg)
            page = LayoutPage(value.name, LayoutChain(), dict(value.context))
            return Response(body=_render_layout_page(page, env, request))
        case Template():
            env = _require_env(kida_env, "Template")
            return Response(body=render_template(env, value))
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (inner, int() as status):
            return negotiate(inner, kida_env=kida_env, request=request).with_status(status)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, dict, list, bytes, Page, Template, or Response."
            )
            raise TypeError(msg)


def _require_env(kida_env: Environment | None, kind: str) -> Environment:
    if kida_env is None:
        msg = f"{kind} return type requires a pages directory. Call app.mount_pages() first."
        raise ConfigurationError(msg)
    return kida_env


def _render_layout_page(
    value: LayoutPage,
    kida_env: Environment,
    request: Request | None,
) -> str:
    """Render the page template, then compose it with its layout chain.

    ``HX-Target`` only narrows the render for htmx requests; a stray
    header on a normal navigation still gets the full page.
    """
    htmx_target: str | None = None
    is_history_restore = False
    if request is not None and request.is_fragment:
        htmx_target = request.htmx_target
        is_history_restore = request.is_history_restore

    page_html = kida_env.get_template(value.name).render(value.context)
    return render_with_layouts(
        kida_env,
        layout_chain=value.layout_chain,
        page_html=page_html,
        context=value.context,
        htmx_target=htmx_target,
        is_history_restore=is_history_restore,
    )
