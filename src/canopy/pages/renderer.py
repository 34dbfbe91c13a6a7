"""Layout chain rendering with HX-Target-aware depth.

The renderer composes nested layouts inside-out using kida's
``render_with_blocks()``.  The ``HX-Target`` header determines how deep
to render: only the layouts below the targeted element are rendered,
so the outer shell stays in place on the client.
"""

from __future__ import annotations

from typing import Any

from kida import Environment

from canopy.pages.types import LayoutChain


def render_with_layouts(
    env: Environment,
    *,
    layout_chain: LayoutChain,
    page_html: str,
    context: dict[str, Any],
    htmx_target: str | None = None,
    is_history_restore: bool = False,
) -> str:
    """Render page content wrapped in its layout chain.

    - **No target** (full page load or history restore): render every
      layout, innermost first.
    - **Target matches a layout**: render from the matched layout down.
    - **Target matches no layout**: return the page HTML as-is.

    Args:
        env: The kida ``Environment`` for loading layout templates.
        layout_chain: Layouts from root (outermost) to deepest.
        page_html: Pre-rendered page content HTML.
        context: Page context, also visible to layout templates.
        htmx_target: Value of ``HX-Target``, or ``None``.
        is_history_restore: Whether this is an htmx history restore.
    """
    layouts = layout_chain.layouts
    if not layouts:
        return page_html

    if is_history_restore or htmx_target is None:
        start_index = 0
    else:
        idx = layout_chain.find_start_index_for_target(htmx_target)
        if idx is None:
            return page_html
        start_index = idx

    html = page_html
    for layout_info in reversed(layouts[start_index:]):
        template = env.get_template(layout_info.template_name)
        html = template.render_with_blocks({"content": html}, **context)
    return html
