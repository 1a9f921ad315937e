"""Waypoint — a Koa-style router for cascading async middleware.

Routes are matched in registration order against the request path, and
the matching middleware runs as one onion-ordered chain. The router
answers 405 (with ``Allow``), 501 and ``OPTIONS`` itself, supports
parameter hooks, named plugins configured per route, and mounting
routers under a prefix.

Basic usage::

    from waypoint import App, Router

    async def load(ctx, next, item_id):
        ctx.state["item"] = await items.get(item_id)
        await next()

    async def show(ctx, next):
        ctx.body = ctx.state["item"]

    router = Router()
    router.param("id", load)
    router.get("/items/:id", show)

    app = App()
    app.use(router.routes())
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Context",
    "HTTPError",
    "MethodNotAllowed",
    "MethodNotImplemented",
    "Middleware",
    "Next",
    "NotFound",
    "RegistrationError",
    "Router",
    "RoutesConfig",
    "WaypointError",
    "compose",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name == "App":
        from waypoint.app import App

        return App

    if name in ("AppConfig", "RoutesConfig"):
        from waypoint import config as _config

        return getattr(_config, name)

    if name == "Router":
        from waypoint.routing.router import Router

        return Router

    if name == "Context":
        from waypoint.context import Context

        return Context

    if name in ("Middleware", "Next", "compose"):
        from waypoint import middleware as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "MethodNotImplemented",
        "NotFound",
        "RegistrationError",
        "WaypointError",
    ):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
