"""Call sync or async handlers uniformly.

Page handlers, route handlers, and error handlers can all be ``def`` or
``async def``.  The sync/async check lives here and nowhere else.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it is awaitable.

    Usage::

        result = await invoke(page.get, id="42")
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
