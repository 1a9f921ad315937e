"""Waypoint exception hierarchy.

Shared across Router, dispatcher, App, and middleware so every module
raises and catches the same types.

Two families live here:

- ``RegistrationError`` -- programmer errors raised synchronously by the
  registration API. Never recoverable, never retried.
- ``HTTPError`` -- routing outcomes (405, 501, ...) raised when the
  dispatcher runs with ``throw=True``, or by handlers via ``ctx.throw()``.
  The host maps them to a response.
"""

from collections.abc import Iterable
from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when app or router configuration is invalid."""


# -- Registration --


class RegistrationError(WaypointError, TypeError):
    """A registration call violated its contract. Nothing was registered."""


class MissingMiddleware(RegistrationError):  # noqa: N818
    """No middleware was supplied to a registration call."""

    def __init__(self, message: str = "middleware is required") -> None:
        super().__init__(message)


class InvalidMiddlewareType(RegistrationError):  # noqa: N818
    """A middleware argument is neither callable nor a plugin mapping."""

    def __init__(self, message: str = "middleware must be a function") -> None:
        super().__init__(message)


class InvalidParamUsage(RegistrationError):  # noqa: N818
    """``param()`` was called without a non-empty key and a callable."""

    def __init__(self, message: str = "usage: param(string, function)") -> None:
        super().__init__(message)


class InvalidPluginUsage(RegistrationError):  # noqa: N818
    """``plugin()`` was called without a non-empty name."""

    def __init__(self, message: str = "usage: plugin(string, function)") -> None:
        super().__init__(message)


class InvalidRouterArgument(RegistrationError):  # noqa: N818
    """``mount()`` was given something that is not a Router."""

    def __init__(self, message: str = "require a Router instance") -> None:
        super().__init__(message)


# -- HTTP outcomes --


@dataclass(frozen=True, slots=True)
class HTTPError(WaypointError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher (``throw=True``), middleware, or handlers.
    The ASGI handler catches these and dispatches to the matching
    ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing handled the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the path is routed, but not for this HTTP method.

    Carries an ``Allow`` header listing the valid methods in the order the
    router first saw them. The order is part of the contract, so unlike a
    set it is never sorted.
    """

    def __init__(self, allowed: Iterable[str], detail: str = "") -> None:
        allow_value = ", ".join(dict.fromkeys(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )

    @property
    def allow(self) -> str:
        """The ``Allow`` header value."""
        return self.headers[0][1]


class MethodNotImplemented(HTTPError):  # noqa: N818
    """501 — the request method is outside the supported verb set."""

    def __init__(self, method: str = "", detail: str = "") -> None:
        default_detail = f"Method {method} is not implemented" if method else "Not Implemented"
        super().__init__(status=501, detail=detail or default_detail)
