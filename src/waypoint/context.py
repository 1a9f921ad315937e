"""Per-request context.

One ``Context`` is created per request by the ASGI handler and threaded
through every middleware. It carries the request (method, path, headers),
the routing results (params, matched route), a ``state`` dict for data
shared between middleware, and the response being built (status, body,
headers).

Status follows Koa's rules: it starts at 404, assigning a body switches it
to 200 (or 204 for ``None``) unless a status was set explicitly first.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from waypoint.errors import HTTPError
from waypoint.http.headers import Headers, ResponseHeaders

if TYPE_CHECKING:
    from waypoint.routing.route import Route


class Context:
    """Mutable request/response context for a single request.

    Not shared between requests: routers only ever read their own tables
    during dispatch and write into the context they were handed.
    """

    __slots__ = (
        "_body",
        "_explicit_status",
        "_status",
        "headers",
        "method",
        "params",
        "path",
        "query_string",
        "response_headers",
        "route",
        "state",
    )

    def __init__(
        self,
        method: str,
        path: str,
        *,
        headers: Headers | None = None,
        query_string: str = "",
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.query_string = query_string
        self.headers = headers if headers is not None else Headers()
        self.params: dict[str, str] = {}
        self.state: dict[str, Any] = {}
        self.route: Route | None = None
        self.response_headers = ResponseHeaders()
        self._status = 404
        self._explicit_status = False
        self._body: Any = None

    def __repr__(self) -> str:
        return f"<Context {self.method} {self.path} status={self._status}>"

    # -- Response status / body --

    @property
    def status(self) -> int:
        return self._status

    @status.setter
    def status(self, value: int) -> None:
        self._status = value
        self._explicit_status = True

    @property
    def body(self) -> Any:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        self._body = value
        if not self._explicit_status:
            self._status = 204 if value is None else 200

    # -- Response headers --

    def set(self, name: str, value: str) -> None:
        """Set a response header, replacing any previous value."""
        self.response_headers.set(name, value)

    def get_header(self, name: str) -> str | None:
        """Return a response header previously set, or ``None``."""
        return self.response_headers.get(name)

    # -- Failures --

    def throw(
        self,
        status: int,
        detail: str = "",
        headers: Iterable[tuple[str, str]] = (),
    ) -> None:
        """Raise an ``HTTPError`` for the host's error handling to render."""
        raise HTTPError(status=status, detail=detail, headers=tuple(headers))
