"""Error handling pipeline for waypoint requests.

Maps HTTPError exceptions and unexpected failures escaping the middleware
pipeline onto the context, using registered error handlers or sensible
defaults. Like Koa, any headers set before the failure are discarded.
"""

import inspect
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from waypoint.context import Context
from waypoint.errors import HTTPError
from waypoint.http.headers import ResponseHeaders

logger = logging.getLogger("waypoint.server")


def status_phrase(status: int) -> str:
    """Reason phrase for *status*, or the bare number for unknown codes."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


async def call_error_handler(
    handler: Callable[..., Any],
    ctx: Context,
    exc: Exception,
) -> None:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (ctx), or two (ctx, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(ctx, exc)
    elif len(params) == 1:
        result = handler(ctx)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    if result is not None:
        ctx.body = result


def _reset(ctx: Context, status: int, headers: tuple[tuple[str, str], ...] = ()) -> None:
    ctx.response_headers = ResponseHeaders()
    for name, value in headers:
        ctx.set(name, value)
    ctx.status = status


async def handle_http_error(
    exc: HTTPError,
    ctx: Context,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Apply an HTTPError to *ctx* using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, ctx.method, ctx.path, exc.detail)

    _reset(ctx, exc.status, exc.headers)

    # Client errors expose their detail; server errors only in debug
    if exc.detail and (exc.status < 500 or debug):
        ctx.body = exc.detail
    else:
        ctx.body = status_phrase(exc.status)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        await call_error_handler(handler, ctx, exc)


async def handle_internal_error(
    exc: Exception,
    ctx: Context,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", ctx.method, ctx.path)

    _reset(ctx, 500)
    ctx.body = f"{type(exc).__name__}: {exc}" if debug else status_phrase(500)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        await call_error_handler(handler, ctx, exc)
