"""Trie router.

Routes are added while the app is being set up and the table is frozen
by ``compile()``.  Matching walks one trie level per path segment, so
cost grows with path depth rather than route count.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from canopy.errors import ConfigurationError, MethodNotAllowed, NotFound
from canopy.routing.params import CONVERTERS
from canopy.routing.route import PathSegment, Route, RouteMatch

_ANGLE_PARAM_RE = re.compile(r"^<[^>]*>$")


def _parse_segment(path: str, part: str) -> PathSegment:
    if _ANGLE_PARAM_RE.match(part):
        msg = (
            f"Route {path!r} uses <param> syntax. "
            "Canopy path parameters are written as {param}."
        )
        raise ConfigurationError(msg)
    if not (part.startswith("{") and part.endswith("}")):
        return PathSegment(value=part)

    name, _, converter = part[1:-1].partition(":")
    converter = converter or "str"
    if converter not in CONVERTERS:
        msg = f"Route {path!r} uses unknown converter {converter!r}."
        raise ConfigurationError(msg)
    return PathSegment(value=part, is_param=True, param_name=name, param_type=converter)


def parse_path(path: str) -> list[PathSegment]:
    """Split a route pattern into static and parameter segments.

    ::

        "/dashboard/users"       -> [PathSegment("dashboard"), PathSegment("users")]
        "/dashboard/users/{id}"  -> [..., PathSegment("{id}", is_param=True, param_name="id")]
        "/files/{rest:path}"     -> [..., PathSegment(..., param_type="path")]

    Raises:
        ConfigurationError: For Flask-style ``<param>`` segments and
            unknown converter names.
    """
    return [_parse_segment(path, part) for part in path.split("/") if part]


@dataclass(slots=True)
class _Node:
    static: dict[str, "_Node"] = field(default_factory=dict)
    param: "_Param | None" = None
    rest: "_Rest | None" = None
    handlers: dict[str, Route] = field(default_factory=dict)


@dataclass(slots=True)
class _Param:
    name: str
    pattern: re.Pattern[str]
    child: _Node = field(default_factory=_Node)


@dataclass(slots=True)
class _Rest:
    """``{name:path}``: swallows every remaining segment."""

    name: str
    child: _Node = field(default_factory=_Node)


class Router:
    """Trie router over ``Route`` objects.

    ::

        router = Router()
        router.add(Route("/dashboard/users/{id}", handler, frozenset({"GET"})))
        router.compile()
        router.match("GET", "/dashboard/users/42").path_params  # {"id": "42"}
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _Node()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Insert *route*.  Only valid before ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if not seg.is_param:
                node = node.static.setdefault(seg.value, _Node())
            elif seg.param_type == "path":
                node.rest = node.rest or _Rest(seg.param_name or "path")
                node = node.rest.child
                break
            else:
                node = self._param_child(node, seg, route.path)

        for method in route.methods:
            node.handlers[method] = route

    @staticmethod
    def _param_child(node: _Node, seg: PathSegment, path: str) -> _Node:
        name = seg.param_name or ""
        if node.param is None:
            node.param = _Param(name, re.compile(f"^{CONVERTERS[seg.param_type]}$"))
        elif node.param.name != name:
            msg = (
                f"Route {path!r} names parameter {name!r} where "
                f"an existing route uses {node.param.name!r}."
            )
            raise ConfigurationError(msg)
        return node.param.child

    def compile(self) -> None:
        """Freeze the table; later ``add()`` calls raise."""
        self._compiled = True

    @property
    def routes(self) -> list[Route]:
        """Every registered route, once each, in trie order."""
        unique: dict[int, Route] = {}
        for node in self._walk(self._root):
            for route in node.handlers.values():
                unique.setdefault(id(route), route)
        return list(unique.values())

    def _walk(self, node: _Node) -> Iterator[_Node]:
        yield node
        for child in node.static.values():
            yield from self._walk(child)
        if node.param is not None:
            yield from self._walk(node.param.child)
        if node.rest is not None:
            yield from self._walk(node.rest.child)

    def match(self, method: str, path: str) -> RouteMatch:
        """Resolve *method* and *path* to a route and its captured params.

        ``HEAD`` is served by the ``GET`` handler when no ``HEAD`` one
        exists.

        Raises:
            NotFound: No route matches the path.
            MethodNotAllowed: The path matches but not for *method*.
        """
        parts = [p for p in path.split("/") if p]
        found = self._find(self._root, parts, {})
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")

        node, params = found
        route = node.handlers.get(method)
        if route is None and method == "HEAD":
            route = node.handlers.get("GET")
        if route is None:
            raise MethodNotAllowed(frozenset(node.handlers))
        return RouteMatch(route=route, path_params=params)

    def _find(
        self,
        node: _Node,
        parts: list[str],
        params: dict[str, str],
    ) -> tuple[_Node, dict[str, str]] | None:
        """Static edges first, then the parameter edge, then the catch-all."""
        if not parts:
            return (node, params) if node.handlers else None

        head, tail = parts[0], parts[1:]

        if head in node.static:
            found = self._find(node.static[head], tail, params)
            if found is not None:
                return found

        if node.param is not None and node.param.pattern.match(head):
            found = self._find(node.param.child, tail, {**params, node.param.name: head})
            if found is not None:
                return found

        if node.rest is not None and node.rest.child.handlers:
            return node.rest.child, {**params, node.rest.name: "/".join(parts)}

        return None
