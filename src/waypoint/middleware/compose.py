"""Sequential middleware composition.

``compose()`` turns an ordered list of middleware into one middleware.
Each stage receives a ``next`` that runs the remaining stages; stage *i*'s
``next`` resolves only after stage *i + 1*'s whole sub-chain has resolved.
"""

from collections.abc import Sequence
from typing import Any

from waypoint._internal.invoke import invoke
from waypoint.context import Context
from waypoint.middleware.protocol import Middleware, Next


def compose(middleware: Sequence[Middleware]) -> Middleware:
    """Compose *middleware* into a single middleware.

    The returned callable takes ``(ctx, next=None)``. When the last stage
    continues, the outer ``next`` (if any) runs. The result of the first
    stage is returned, so a handler's return value flows back to the
    caller.

    Raises ``RuntimeError`` when a stage calls its ``next`` twice.
    """
    stack = tuple(middleware)

    async def composed(ctx: Context, next: Next | None = None) -> Any:
        index = -1

        async def dispatch(i: int) -> Any:
            nonlocal index
            if i <= index:
                msg = "next() called multiple times"
                raise RuntimeError(msg)
            index = i
            if i == len(stack):
                if next is None:
                    return None
                return await next()
            return await invoke(stack[i], ctx, lambda: dispatch(i + 1))

        return await dispatch(0)

    return composed
