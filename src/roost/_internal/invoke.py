"""Invoke helper — call sync or async callables uniformly.

Route handlers, renderers, hooks, and error handlers can be ``def`` or
``async def``. The sync/async check lives in exactly one place::

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
