"""Template and Page return types.

Frozen dataclasses that handlers return. The negotiation layer inspects
these to dispatch to the kida renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from canopy.pages.types import LayoutChain


@dataclass(frozen=True, slots=True)
class Template:
    """Render a full kida template, with no layouts around it.

    Usage::

        return Template("standalone.html", title="Home")
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)


@dataclass(frozen=True, slots=True)
class Page:
    """Render a page template inside its layout chain.

    Returned from filesystem page handlers.  When *name* is omitted the
    page's sibling ``page.html`` is used::

        # pages/(dashboard)/dashboard/users/{id}/page.py
        def get(id: str) -> Page:
            return Page(id=id)
    """

    name: str | None
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str | None = None, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)


@dataclass(frozen=True, slots=True)
class LayoutPage:
    """A Page bound to the layout chain of the route that produced it.

    Built by the pages wrapper, never by user code.
    """

    name: str
    layout_chain: LayoutChain
    context: dict[str, Any] = field(default_factory=dict)
