"""Filesystem route discovery for the pages/ directory.

Walks the pages directory tree and discovers:

- ``_layout.html`` files as layout templates
- ``page.py`` and other ``.py`` files as handler modules
- ``page.html`` files as page templates (a directory with only a
  ``page.html`` becomes a static GET page)
- ``_error.html`` at the root as the global error boundary template

Directory names wrapped in ``{braces}`` become path parameters.
Directory names wrapped in ``(parens)`` are route groups: their layouts
apply to everything beneath them but they add no URL segment.
"""

from __future__ import annotations

import importlib.util
import logging
import re
from pathlib import Path
from typing import Any

from canopy.errors import ConfigurationError
from canopy.pages.types import LayoutChain, LayoutInfo, PageRoute
from canopy.templating.returns import Page

logger = logging.getLogger("canopy.pages")

# HTTP method names recognised as handler functions
_HTTP_METHODS = ("get", "post", "put", "delete", "patch")

# {# target: element_id #} in layout templates
_TARGET_RE = re.compile(r"\{#\s*target:\s*(\S+)\s*#\}")

_PARAM_DIR_RE = re.compile(r"^\{(\w+)\}$")
_GROUP_DIR_RE = re.compile(r"^\((\w[\w-]*)\)$")

LAYOUT_FILE = "_layout.html"
PAGE_TEMPLATE = "page.html"
ERROR_TEMPLATE = "_error.html"


def discover_pages(pages_dir: str | Path) -> list[PageRoute]:
    """Walk a pages directory and discover all routes.

    Args:
        pages_dir: Path to the ``pages/`` directory.

    Returns:
        Discovered :class:`PageRoute` objects, parents before children.

    Raises:
        FileNotFoundError: If *pages_dir* is not a directory.
        ConfigurationError: If two files claim the same URL and method
            (usually two route groups both defining a page).
    """
    root = Path(pages_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Pages directory not found: {root}")

    routes: list[PageRoute] = []
    _walk_directory(root, root, url_parts=[], layouts=[], depth=0, routes=routes)

    claimed: dict[tuple[str, str], PageRoute] = {}
    for route in routes:
        for method in route.methods:
            key = (route.url_path, method)
            if key in claimed:
                msg = f"Two pages define {method} {route.url_path}"
                raise ConfigurationError(msg)
            claimed[key] = route

    logger.debug("Discovered %d page routes under %s", len(routes), root)
    return routes


def discover_error_template(pages_dir: str | Path) -> str | None:
    """Template name of the root ``_error.html``, or ``None``."""
    if (Path(pages_dir) / ERROR_TEMPLATE).is_file():
        return ERROR_TEMPLATE
    return None


def _walk_directory(
    directory: Path,
    root: Path,
    *,
    url_parts: list[str],
    layouts: list[LayoutInfo],
    depth: int,
    routes: list[PageRoute],
) -> None:
    """Recursively walk a directory, discovering routes and layouts."""
    current_layouts = list(layouts)
    layout_file = directory / LAYOUT_FILE
    if layout_file.is_file():
        current_layouts.append(
            LayoutInfo(
                template_name=_template_name(layout_file, root),
                target=_parse_layout_target(layout_file),
                depth=depth,
            )
        )
    layout_chain = LayoutChain(tuple(current_layouts))

    page_template = directory / PAGE_TEMPLATE
    template_name = _template_name(page_template, root) if page_template.is_file() else None

    has_page_module = False
    for item in sorted(directory.iterdir()):
        if not item.is_file() or item.suffix != ".py" or item.name.startswith("_"):
            continue
        if item.stem == "page":
            has_page_module = True
        _process_route_file(
            item,
            root,
            url_parts=url_parts,
            layout_chain=layout_chain,
            template_name=template_name if item.stem == "page" else None,
            routes=routes,
        )

    if template_name is not None and not has_page_module:
        routes.append(
            PageRoute(
                url_path=_url_path(url_parts),
                handler=render_static_page,
                methods=frozenset({"GET"}),
                layout_chain=layout_chain,
                template_name=template_name,
            )
        )

    for item in sorted(directory.iterdir()):
        if not item.is_dir() or item.name.startswith(("_", ".")):
            continue

        if _GROUP_DIR_RE.match(item.name):
            child_parts = url_parts
        elif param_match := _PARAM_DIR_RE.match(item.name):
            child_parts = [*url_parts, "{" + param_match.group(1) + "}"]
        else:
            child_parts = [*url_parts, item.name]

        _walk_directory(
            item,
            root,
            url_parts=child_parts,
            layouts=current_layouts,
            depth=depth + 1,
            routes=routes,
        )


def render_static_page() -> Page:
    """Handler for a directory that has a ``page.html`` but no ``page.py``."""
    return Page()


def _template_name(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def _url_path(url_parts: list[str]) -> str:
    return "/" + "/".join(url_parts) if url_parts else "/"


def _parse_layout_target(layout_file: Path) -> str:
    """Extract the ``{# target: element_id #}`` declaration, default ``"body"``."""
    match = _TARGET_RE.search(layout_file.read_text(encoding="utf-8"))
    if match:
        return match.group(1)
    return "body"


def _load_module(file: Path, root: Path) -> Any:
    relative = file.relative_to(root).with_suffix("").as_posix()
    module_name = "_canopy_page_" + re.sub(r"\W", "_", relative)
    spec = importlib.util.spec_from_file_location(module_name, file)
    if spec is None or spec.loader is None:
        msg = f"Cannot load page module {file}"
        raise ConfigurationError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _process_route_file(
    file: Path,
    root: Path,
    *,
    url_parts: list[str],
    layout_chain: LayoutChain,
    template_name: str | None,
    routes: list[PageRoute],
) -> None:
    """Load a route .py file and register its handler functions.

    ``page.py`` maps to the directory URL.  Other files append their
    stem.  Handlers are functions named after HTTP methods; a module with
    none of those but a ``handler`` function serves it on GET.
    """
    module = _load_module(file, root)

    if file.stem == "page":
        url_path = _url_path(url_parts)
    else:
        url_path = _url_path([*url_parts, file.stem])

    found: dict[str, Any] = {}
    for method_name in _HTTP_METHODS:
        func = getattr(module, method_name, None)
        if callable(func):
            found[method_name.upper()] = func

    handler = getattr(module, "handler", None)
    if not found and callable(handler):
        found["GET"] = handler

    if not found:
        logger.warning("%s defines no handler functions; skipped", file)
        return

    for method, func in found.items():
        routes.append(
            PageRoute(
                url_path=url_path,
                handler=func,
                methods=frozenset({method}),
                layout_chain=layout_chain,
                template_name=template_name,
            )
        )
