"""Shared type aliases used across waypoint modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Error handler: receives (ctx, error?) and may return a body
ErrorHandler: TypeAlias = Callable[..., Any]
