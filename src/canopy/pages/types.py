"""Data models for filesystem-based page routing.

Immutable frozen dataclasses representing discovered layouts and page
routes.  Built once at app startup during discovery.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class LayoutInfo:
    """A ``_layout.html`` template discovered in the pages tree.

    Attributes:
        template_name: Template name for kida (relative to the pages root).
        target: DOM element ID this layout's output fills, declared with
            ``{# target: element_id #}``.  ``"body"`` when undeclared.
        depth: Directory depth the layout was found at (0 = root).
    """

    template_name: str
    target: str
    depth: int


@dataclass(frozen=True, slots=True)
class LayoutChain:
    """Ordered sequence of layouts from root (outermost) to deepest."""

    layouts: tuple[LayoutInfo, ...] = ()

    def find_start_index_for_target(self, htmx_target: str | None) -> int | None:
        """Index of the layout whose declared target is *htmx_target*.

        Returns ``None`` when there is no target or nothing matches, in
        which case the caller treats the request as a bare fragment.
        """
        if htmx_target is None:
            return None
        target_id = htmx_target.lstrip("#")
        for i, layout in enumerate(self.layouts):
            if layout.target == target_id:
                return i
        return None


@dataclass(frozen=True, slots=True)
class PageRoute:
    """A discovered page route with its layout chain.

    Attributes:
        url_path: URL pattern (e.g. ``/dashboard/users/{id}``).
        handler: The route handler callable.
        methods: HTTP methods (e.g. ``frozenset({"GET"})``).
        layout_chain: The layouts wrapping this route, root first.
        template_name: Sibling ``page.html``, when there is one.
    """

    url_path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    layout_chain: LayoutChain = field(default_factory=LayoutChain)
    template_name: str | None = None
