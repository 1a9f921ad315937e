"""Invoke helpers — call sync or async middleware uniformly.

Terminal handlers can be ``def`` or ``async def``. Any code that calls
a user-provided middleware must handle both cases. This module provides
a single helper so the sync/async check lives in exactly one place.

Usage::

    from waypoint._internal.invoke import invoke

    result = await invoke(middleware, ctx, next)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: a terminal handler that never continues the chain
        def hello(ctx, next):
            ctx.body = "world"

        # async: may await the rest of the chain
        async def timing(ctx, next):
            start = time.monotonic()
            await next()
            ctx.set("X-Time", f"{time.monotonic() - start:.3f}")
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
