"""Invoke helpers — call sync or async callables uniformly.

Route handlers, error handlers, lifecycle hooks and router callbacks can
all be ``def`` or ``async def``. Any code that calls one of them goes
through :func:`invoke` so the sync/async check lives in exactly one place.

Usage::

    from detour._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with plain functions, coroutine functions, and functions that
    return a future or task::

        def router(request):
            return "https://localhost:6003"

        async def router(request):
            return await lookup(request.headers.get("host"))
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
