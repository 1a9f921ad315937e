"""ASGI response sending — translates the finished Context to ASGI messages.

Body encoding follows the value assigned to ``ctx.body``:

- ``None``            -> the status reason phrase (``"Not Found"``)
- ``str``             -> text/html if it looks like markup, else text/plain
- ``bytes``           -> application/octet-stream
- anything else       -> JSON
"""

import json as json_module
from typing import Any

from waypoint._internal.asgi import Send
from waypoint.context import Context
from waypoint.server.errors import status_phrase


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_body(body: Any, status: int) -> tuple[bytes, str]:
    """Return ``(payload, default content type)`` for a context body."""
    match body:
        case None:
            return status_phrase(status).encode("utf-8"), "text/plain; charset=utf-8"
        case str():
            if body.lstrip().startswith("<"):
                return body.encode("utf-8"), "text/html; charset=utf-8"
            return body.encode("utf-8"), "text/plain; charset=utf-8"
        case bytes() | bytearray() | memoryview():
            return bytes(body), "application/octet-stream"
        case _:
            return json_module.dumps(body).encode("utf-8"), "application/json"


async def send_response(ctx: Context, send: Send) -> None:
    """Translate a finished Context into ASGI send() calls."""
    status = ctx.status
    raw_headers: list[tuple[bytes, bytes]] = []

    if _body_allowed(status):
        body, content_type = encode_body(ctx.body, status)
        if "content-type" not in ctx.response_headers:
            raw_headers.append((b"content-type", content_type.encode("latin-1")))
    else:
        body = b""

    for name, value in ctx.response_headers:
        if name.lower() == "content-length":
            continue
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    # HEAD keeps the length of the body it would have sent
    if ctx.method == "HEAD":
        body = b""

    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
