"""Routing — ordered route table, Koa-style matching and dispatch.

Routes are matched in registration order on every request; the dispatcher
derives 405/501/204 outcomes from what the table declares.
"""

from waypoint.routing.dispatch import Dispatcher, Resolution, resolve
from waypoint.routing.pattern import CATCH_ALL, ParamKey, PathPattern, compile_path, sanitize_path
from waypoint.routing.route import (
    HTTP_METHODS,
    MethodRoute,
    ParameterHook,
    PluginConfig,
    Route,
    UseMiddleware,
)
from waypoint.routing.router import Router

__all__ = [
    "CATCH_ALL",
    "HTTP_METHODS",
    "Dispatcher",
    "MethodRoute",
    "ParamKey",
    "ParameterHook",
    "PathPattern",
    "PluginConfig",
    "Resolution",
    "Route",
    "Router",
    "UseMiddleware",
    "compile_path",
    "resolve",
    "sanitize_path",
]
