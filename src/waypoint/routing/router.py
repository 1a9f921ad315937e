"""Router — append-only route table with Koa-style registration.

Routes are matched in registration order; that order is the only
priority signal. Every registration call validates all its arguments
before appending anything, so a failed call leaves the table unchanged.

Usage::

    router = Router()
    router.use(timing)
    router.param("id", load_item)
    router.get("/items/:id", show_item)
    router.mount("/admin", admin_router)

    app.use(router.routes())
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any, TypeAlias

from waypoint.config import RoutesConfig
from waypoint.errors import (
    ConfigurationError,
    InvalidMiddlewareType,
    InvalidParamUsage,
    InvalidPluginUsage,
    InvalidRouterArgument,
    MissingMiddleware,
)
from waypoint.middleware.compose import compose
from waypoint.middleware.protocol import Middleware
from waypoint.routing.dispatch import Dispatcher, Resolution, resolve
from waypoint.routing.pattern import CATCH_ALL, compile_path, sanitize_path
from waypoint.routing.route import (
    HTTP_METHODS,
    MethodRoute,
    ParameterHook,
    PluginConfig,
    Route,
    UseMiddleware,
)

logger = logging.getLogger("waypoint.routing")

PathLike: TypeAlias = str | re.Pattern[str]


def _flatten(items: Iterable[Any]) -> list[Any]:
    """Expand nested lists/tuples of middleware, preserving order."""
    flat: list[Any] = []
    for item in items:
        if isinstance(item, list | tuple):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


def _is_path(value: Any) -> bool:
    return value is None or isinstance(value, str | re.Pattern)


def _split_path(args: tuple[Any, ...], default: str) -> tuple[PathLike, tuple[Any, ...]]:
    """Split ``(path?, *middleware)`` call arguments."""
    if args and _is_path(args[0]):
        return args[0] or default, args[1:]
    return default, args


def _normalize_methods(methods: str | Iterable[str] | None) -> tuple[str, ...] | None:
    if methods is None:
        return None
    if isinstance(methods, str):
        methods = (methods,)
    verbs = tuple(dict.fromkeys(m.upper() for m in methods))
    if not verbs:
        msg = "methods must name at least one HTTP verb (use None for use-middleware)"
        raise ConfigurationError(msg)
    return verbs


class Router:
    """Ordered route table plus a registry of named plugins.

    All registration methods return the router, so calls chain::

        router.param("id", load).get("/:id", show)
    """

    __slots__ = ("_plugins", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._plugins: dict[str, Middleware] = {}

    def __repr__(self) -> str:
        return f"<Router routes={len(self._routes)} plugins={sorted(self._plugins)}>"

    @property
    def stack(self) -> tuple[Route, ...]:
        """The route table, in matching order."""
        return tuple(self._routes)

    @property
    def plugins(self) -> Mapping[str, Middleware]:
        """Read-only view of this router's plugin registry."""
        return MappingProxyType(self._plugins)

    # -- Registration --

    def register(
        self,
        methods: str | Iterable[str] | None,
        path: PathLike | None,
        *middleware: Any,
        param_key: str | None = None,
    ) -> Router:
        """Register one route per middleware on *path*.

        ``methods=None`` registers use-middleware (or a parameter hook when
        *param_key* is given). Middleware may be nested lists; each must be
        callable or a plugin mapping.

        Raises ``MissingMiddleware`` or ``InvalidMiddlewareType``.
        """
        stack = _flatten(middleware)
        if not stack:
            raise MissingMiddleware
        for item in stack:
            if not callable(item) and not isinstance(item, Mapping):
                raise InvalidMiddlewareType
            if param_key is not None and not callable(item):
                raise InvalidMiddlewareType

        verbs = _normalize_methods(methods)
        if isinstance(path, re.Pattern):
            display = path.pattern
        else:
            path = display = sanitize_path(path)
        pattern = compile_path(path)

        logger.debug("register %s %s", ",".join(verbs) if verbs else "*", display)

        routes: list[Route] = []
        for item in stack:
            if param_key is not None:
                routes.append(ParameterHook(display, pattern, param_key, item))
            elif not callable(item):
                routes.append(PluginConfig(display, pattern, MappingProxyType(dict(item))))
            elif verbs is not None:
                routes.append(MethodRoute(display, pattern, verbs, item))
            else:
                routes.append(UseMiddleware(display, pattern, item))
        self._routes.extend(routes)
        return self

    def register_route(
        self,
        methods: str | Iterable[str],
        path: PathLike | None,
        *middleware: Any,
    ) -> Router:
        """Register method-scoped routes (plugin mappings become plugin routes)."""
        if methods is None:
            msg = "register_route() needs methods; use use() for use-middleware"
            raise ConfigurationError(msg)
        return self.register(methods, path, *middleware)

    def register_param_hook(self, key: str, *middleware: Any) -> Router:
        """Register middleware that runs when parameter *key* is captured."""
        if not isinstance(key, str) or not key:
            raise InvalidParamUsage
        stack = _flatten(middleware)
        if stack and not all(callable(item) for item in stack):
            raise InvalidParamUsage
        return self.register(None, CATCH_ALL, *stack, param_key=key)

    def register_plugin(self, name: str, *middleware: Any) -> Router:
        """Store *middleware*, composed, as plugin *name* (replacing any previous one)."""
        if not isinstance(name, str) or not name:
            raise InvalidPluginUsage
        stack = _flatten(middleware)
        if not stack:
            raise MissingMiddleware
        if not all(callable(item) for item in stack):
            raise InvalidMiddlewareType
        logger.debug("plugin %s (%d middleware)", name, len(stack))
        self._plugins[name] = compose(stack)
        return self

    def use(self, *args: Any) -> Router:
        """``use([path], *middleware)`` — run on every method; path defaults to all paths."""
        path, middleware = _split_path(args, CATCH_ALL)
        return self.register(None, path, *middleware)

    def param(self, key: Any = None, fn: Any = None) -> Router:
        """``param(key, fn)`` — call ``fn(ctx, next, value)`` when ``key`` is captured."""
        if not isinstance(key, str) or not key or not callable(fn):
            raise InvalidParamUsage
        return self.register_param_hook(key, fn)

    def plugin(self, name: Any = None, *middleware: Any) -> Router:
        """``plugin(name, *middleware)`` — define a plugin activated by route mappings."""
        return self.register_plugin(name, *middleware)

    def all(self, *args: Any) -> Router:  # noqa: A003
        """``all([path], *middleware)`` — serve every supported verb."""
        path, middleware = _split_path(args, "/")
        return self.register(HTTP_METHODS, path, *middleware)

    # -- Verb helpers: helper([path], *middleware), path defaults to "/" --

    def get(self, *args: Any) -> Router:
        return self._verb("GET", args)

    def head(self, *args: Any) -> Router:
        return self._verb("HEAD", args)

    def options(self, *args: Any) -> Router:
        return self._verb("OPTIONS", args)

    def post(self, *args: Any) -> Router:
        return self._verb("POST", args)

    def put(self, *args: Any) -> Router:
        return self._verb("PUT", args)

    def patch(self, *args: Any) -> Router:
        return self._verb("PATCH", args)

    def delete(self, *args: Any) -> Router:
        return self._verb("DELETE", args)

    def _verb(self, method: str, args: tuple[Any, ...]) -> Router:
        path, middleware = _split_path(args, "/")
        return self.register_route(method, path, *middleware)

    # -- Composition --

    def mount(self, prefix: str, router: Router) -> Router:
        """Copy *router*'s routes here under *prefix*, at the current position.

        The copy is taken now: later registrations on *router* do not show
        up here. Plugins are not copied; plugin routes resolve against the
        registry of the router that dispatches.

        Copying is proportional to the child's table size.
        """
        if not isinstance(router, Router):
            raise InvalidRouterArgument
        prefix = prefix or ""
        logger.debug("mount %s (%d routes)", prefix or "/", len(router._routes))
        self._routes.extend(route.with_prefix(prefix) for route in router._routes)
        return self

    # -- Dispatch --

    def resolve(
        self,
        method: str,
        path: str,
        *,
        plugin_state_key: str = "plugins",
    ) -> Resolution:
        """Compute the chain, allowed verbs and params for one request."""
        return resolve(
            self._routes,
            self._plugins,
            method,
            path,
            plugin_state_key=plugin_state_key,
        )

    def routes(self, config: RoutesConfig | None = None, *, throw: bool | None = None) -> Dispatcher:
        """Return the middleware that dispatches requests through this router.

        ``throw=True`` (or ``RoutesConfig(throw=True)``) raises
        ``MethodNotAllowed`` / ``MethodNotImplemented`` instead of setting
        405 / 501 on the context.
        """
        config = config or RoutesConfig()
        if throw is not None:
            config = replace(config, throw=throw)
        return Dispatcher(self, config)
