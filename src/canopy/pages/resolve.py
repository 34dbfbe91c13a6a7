"""Handler argument resolution and Page upgrade.

Resolution for each handler parameter, in order:

1. ``request`` — the Request object (by name or annotation)
2. Path parameters — from the URL match, coerced through the
   parameter's annotation when it has one

Anything else must have a default.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from canopy.errors import ConfigurationError
from canopy.http.request import Request
from canopy.templating.returns import LayoutPage, Page

if TYPE_CHECKING:
    from canopy.pages.types import LayoutChain


def resolve_kwargs(handler: Callable[..., Any], request: Request) -> dict[str, Any]:
    """Build keyword arguments for *handler* from the request.

    A path parameter whose annotation cannot convert the raw string
    (``int("abc")``) is passed through unconverted.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in request.path_params:
            value = request.path_params[name]
            if param.annotation is inspect.Parameter.empty or param.annotation is str:
                kwargs[name] = value
            else:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value

    return kwargs


def upgrade_result(
    result: Any,
    layout_chain: LayoutChain,
    template_name: str | None,
) -> Any:
    """Bind a ``Page`` result to its route's layout chain.

    A nameless ``Page`` takes the route's sibling ``page.html``.  All
    other return types pass through unchanged.

    Raises:
        ConfigurationError: If a nameless ``Page`` comes from a route
            that has no ``page.html``.
    """
    if not isinstance(result, Page):
        return result

    name = result.name or template_name
    if name is None:
        msg = "Page() returned without a template name and no sibling page.html exists."
        raise ConfigurationError(msg)
    return LayoutPage(name, layout_chain, dict(result.context))
