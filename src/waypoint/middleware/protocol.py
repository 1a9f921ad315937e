"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(ctx: Context, next: Next) -> Any: ...

No base class required. The framework checks the shape, not the lineage.

``next`` runs the rest of the chain and resolves only once everything
after this middleware has finished (onion order). Not awaiting ``next``
stops the chain at this middleware; that is how a middleware
short-circuits a request.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeAlias

from waypoint.context import Context

# The rest of the chain
Next: TypeAlias = Callable[[], Awaitable[Any]]


class Middleware(Protocol):
    """Protocol for waypoint middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: Context, next: Next) -> None:
            start = time.monotonic()
            await next()
            ctx.set("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class RequireUser:
            async def __call__(self, ctx: Context, next: Next) -> None:
                ...
    """

    def __call__(self, ctx: Context, next: Next) -> Any: ...


class ParamHook(Protocol):
    """Protocol for parameter hooks registered with ``Router.param()``.

    Receives the captured parameter value as a third argument::

        async def load_user(ctx: Context, next: Next, user_id: str) -> None:
            ctx.state["user"] = await users.get(user_id)
            await next()
    """

    def __call__(self, ctx: Context, next: Next, value: str) -> Any: ...
