"""ASGI handler — translates ASGI scope/messages to waypoint types.

The only component that touches raw ASGI request data. Builds a Context
from the scope, runs it through the app's middleware pipeline, maps
escaping errors, and sends the finished response through ASGI send().
"""

from collections.abc import Callable
from typing import Any

from waypoint._internal.asgi import Receive, Scope, Send
from waypoint.context import Context
from waypoint.errors import HTTPError
from waypoint.http.headers import Headers
from waypoint.middleware.protocol import Middleware
from waypoint.server.errors import handle_http_error, handle_internal_error
from waypoint.server.sender import send_response


def context_from_scope(scope: Scope) -> Context:
    """Build a Context from a raw ASGI HTTP scope.

    The path stays percent-encoded (``raw_path`` when the server provides
    it) so the router decodes each parameter exactly once.
    """
    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1").partition("?")[0] if raw_path else scope["path"]
    return Context(
        scope["method"],
        path or "/",
        headers=Headers(tuple(scope.get("headers", ()))),
        query_string=scope.get("query_string", b"").decode("latin-1"),
    )


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: Middleware,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    ctx = context_from_scope(scope)

    try:
        await pipeline(ctx)
    except HTTPError as exc:
        await handle_http_error(exc, ctx, error_handlers, debug)
    except Exception as exc:
        await handle_internal_error(exc, ctx, error_handlers, debug)

    await send_response(ctx, send)
