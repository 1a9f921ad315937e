"""Request-time matching and dispatch.

``resolve()`` is the whole algorithm: one scan of the route table in
registration order, producing the ordered middleware chain, the verbs the
path allows, and the request's parameters. It is pure with respect to the
router: the table and plugin registry are only read, and every call
allocates its own parameter map.

``Dispatcher`` is the middleware ``Router.routes()`` returns. It turns a
``Resolution`` into HTTP semantics:

=====================================  ======================================
no method route matches the path       pass through to ``next`` (host 404)
method outside ``HTTP_METHODS``        501
path routed, verb not served           405 with ``Allow`` (``OPTIONS``: 204)
otherwise                              run the chain, then ``next``
=====================================  ======================================
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from waypoint._internal.invoke import invoke
from waypoint.config import RoutesConfig
from waypoint.context import Context
from waypoint.errors import MethodNotAllowed, MethodNotImplemented
from waypoint.middleware.compose import compose
from waypoint.middleware.protocol import Middleware, Next
from waypoint.routing.params import extract_params
from waypoint.routing.route import (
    HTTP_METHODS,
    MethodRoute,
    ParameterHook,
    PluginConfig,
    Route,
    UseMiddleware,
)

logger = logging.getLogger("waypoint.routing")


@dataclass(frozen=True, slots=True)
class Resolution:
    """The outcome of scanning a route table for one request.

    ``allowed`` is de-duplicated and ordered by first appearance.
    ``routes`` lists every route whose pattern matched, in scan order.
    """

    chain: tuple[Middleware, ...]
    allowed: tuple[str, ...]
    matched: bool
    params: dict[str, str] = field(default_factory=dict)
    routes: tuple[Route, ...] = ()

    @property
    def allow_header(self) -> str:
        return ", ".join(self.allowed)


def resolve(
    routes: Sequence[Route],
    plugins: Mapping[str, Middleware],
    method: str,
    path: str,
    *,
    plugin_state_key: str = "plugins",
) -> Resolution:
    """Scan *routes* once and build the execution chain for *method* *path*."""
    method = method.upper()
    params: dict[str, str] = {}
    pending: dict[str, ParameterHook] = {}
    chain: list[Middleware] = []
    allowed: list[str] = []
    seen: list[Route] = []
    matched = False

    for route in routes:
        captures = route.pattern.match(path)
        if captures is None:
            continue
        seen.append(route)
        extract_params(route.pattern.keys, captures, params)

        match route:
            case ParameterHook():
                pending[route.param_key] = route
            case PluginConfig():
                for name, options in route.plugins.items():
                    plugin = plugins.get(name)
                    if plugin is None:
                        logger.debug("ignoring unknown plugin %r on %s", name, route.path)
                        continue
                    chain.append(_plugin_stage(name, plugin, options, plugin_state_key))
            case UseMiddleware():
                chain.append(route.middleware)
            case MethodRoute():
                if "GET" in route.methods:
                    allowed.append("HEAD")
                allowed.extend(route.methods)
                if not route.allows(method):
                    continue
                matched = True
                # hooks fire in the order their names first appeared in the URL
                for name in params:
                    hook = pending.pop(name, None)
                    if hook is not None:
                        chain.append(_hook_stage(hook))
                chain.append(_route_stage(route))

    return Resolution(
        chain=tuple(chain),
        allowed=tuple(dict.fromkeys(allowed)),
        matched=matched,
        params=params,
        routes=tuple(seen),
    )


def _plugin_stage(name: str, plugin: Middleware, options: Any, state_key: str) -> Middleware:
    async def run_plugin(ctx: Context, next: Next) -> Any:
        ctx.state.setdefault(state_key, {})[name] = options
        return await invoke(plugin, ctx, next)

    return run_plugin


def _hook_stage(hook: ParameterHook) -> Middleware:
    async def run_hook(ctx: Context, next: Next) -> Any:
        return await invoke(hook.middleware, ctx, next, ctx.params.get(hook.param_key))

    return run_hook


def _route_stage(route: MethodRoute) -> Middleware:
    async def run_route(ctx: Context, next: Next) -> Any:
        ctx.route = route
        return await invoke(route.middleware, ctx, next)

    return run_route


class Dispatcher:
    """Middleware that routes requests through a ``Router``'s table.

    Reads the router's table and plugin registry on every request, so
    routes and plugins registered after ``routes()`` was called still
    apply.
    """

    __slots__ = ("config", "router")

    def __init__(self, router: Any, config: RoutesConfig | None = None) -> None:
        self.router = router
        self.config = config or RoutesConfig()

    def __repr__(self) -> str:
        return f"<Dispatcher throw={self.config.throw} routes={len(self.router.stack)}>"

    async def __call__(self, ctx: Context, next: Next) -> Any:
        method = ctx.method.upper()
        logger.debug("route %s %s", method, ctx.path)
        resolution = self.router.resolve(
            method,
            ctx.path,
            plugin_state_key=self.config.plugin_state_key,
        )

        if not resolution.allowed:
            return await next()

        ctx.params = resolution.params

        if method not in HTTP_METHODS:
            logger.debug("501 %s %s", method, ctx.path)
            if self.config.throw:
                raise MethodNotImplemented(method)
            ctx.status = 501
            return await next()

        if not resolution.matched:
            allow = resolution.allow_header
            if method == "OPTIONS":
                ctx.status = 204
                ctx.set("Allow", allow)
                return await next()
            logger.debug("405 %s %s (allow: %s)", method, ctx.path, allow)
            if self.config.throw:
                raise MethodNotAllowed(resolution.allowed)
            ctx.status = 405
            ctx.set("Allow", allow)
            return await next()

        await compose(resolution.chain)(ctx)
        return await next()
