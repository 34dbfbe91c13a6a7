"""Path parameter converters.

Each converter is the regex a captured segment must match.  Values stay
strings in ``RouteMatch.path_params``; handlers opt into conversion
through their own annotations.
"""

CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}
