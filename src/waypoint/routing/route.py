"""Route variants.

Every registration produces one route per middleware. A route is exactly
one of four frozen variants; the dispatcher matches over them instead of
probing optional fields:

- ``UseMiddleware``  -- runs on every path match, whatever the method
- ``MethodRoute``    -- runs when the request method is one of ``methods``
- ``ParameterHook``  -- runs once when the named parameter is captured
- ``PluginConfig``   -- activates named plugins with per-route options
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, TypeAlias, TypeVar

from waypoint.middleware.protocol import Middleware, ParamHook
from waypoint.routing.pattern import PathPattern

# Verbs the router serves; anything else is answered with 501
HTTP_METHODS: tuple[str, ...] = ("GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE")


@dataclass(frozen=True, slots=True)
class UseMiddleware:
    path: str
    pattern: PathPattern
    middleware: Middleware

    def with_prefix(self, prefix: str) -> UseMiddleware:
        return _prefixed(self, prefix)


@dataclass(frozen=True, slots=True)
class MethodRoute:
    """A route scoped to HTTP verbs.

    ``methods`` is upper-cased, de-duplicated and kept in declaration
    order; that order decides the ``Allow`` header.
    """

    path: str
    pattern: PathPattern
    methods: tuple[str, ...]
    middleware: Middleware

    def with_prefix(self, prefix: str) -> MethodRoute:
        return _prefixed(self, prefix)

    def allows(self, method: str) -> bool:
        """True if *method* is served here (``HEAD`` is served by ``GET``)."""
        return method in self.methods or (method == "HEAD" and "GET" in self.methods)


@dataclass(frozen=True, slots=True)
class ParameterHook:
    path: str
    pattern: PathPattern
    param_key: str
    middleware: ParamHook

    def with_prefix(self, prefix: str) -> ParameterHook:
        return _prefixed(self, prefix)


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """Per-route plugin options: plugin name -> opaque configuration value."""

    path: str
    pattern: PathPattern
    plugins: Mapping[str, Any]

    def with_prefix(self, prefix: str) -> PluginConfig:
        return _prefixed(self, prefix)


Route: TypeAlias = UseMiddleware | MethodRoute | ParameterHook | PluginConfig

R = TypeVar("R", bound=Route)


def _prefixed(route: R, prefix: str) -> R:
    pattern = route.pattern.with_prefix(prefix)
    path = pattern.source if isinstance(pattern.source, str) else pattern.source.pattern
    return replace(route, path=path, pattern=pattern)
