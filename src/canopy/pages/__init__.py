"""Filesystem-based routing with automatic layout nesting.

The ``pages/`` directory structure defines URL paths and layout nesting.

Usage::

    app = App(AppConfig(pages_dir="pages"))
    app.mount_pages()
    app.run()

Conventions::

    pages/
      _layout.html            # Root layout (target: body)
      _error.html             # Global error boundary
      page.html               # GET /
      (dashboard)/            # Route group: layout scope, no URL segment
        _layout.html          # Dashboard layout (target: root-content)
        dashboard/
          users/
            page.html         # GET /dashboard/users
            {id}/
              page.py         # GET /dashboard/users/{id}
              page.html
"""

from canopy.pages.discovery import discover_error_template, discover_pages
from canopy.pages.renderer import render_with_layouts
from canopy.pages.types import LayoutChain, LayoutInfo, PageRoute

__all__ = [
    "LayoutChain",
    "LayoutInfo",
    "PageRoute",
    "discover_error_template",
    "discover_pages",
    "render_with_layouts",
]
