"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(ctx: Context, next: Next) -> Any

``compose`` chains middleware into one, Koa-style.
"""

from waypoint.middleware.compose import compose
from waypoint.middleware.protocol import Middleware, Next, ParamHook

__all__ = [
    "Middleware",
    "Next",
    "ParamHook",
    "compose",
]
