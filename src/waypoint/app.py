"""Waypoint application class.

A cascading middleware host: ``app.use()`` appends middleware, and each
request runs them in order, every one receiving a ``next`` that runs the
rest. Mutable during setup; frozen when the first ASGI call arrives.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any

from waypoint._internal.asgi import Receive, Scope, Send
from waypoint._internal.types import ErrorHandler
from waypoint.config import AppConfig
from waypoint.errors import ConfigurationError, InvalidMiddlewareType
from waypoint.middleware.compose import compose
from waypoint.middleware.protocol import Middleware
from waypoint.server.handler import handle_request

logger = logging.getLogger("waypoint.server")


class App:
    """The waypoint application.

    Mutable during setup (middleware, error handlers, lifecycle hooks).
    Frozen at runtime when ``__call__()`` is first invoked.

    Usage::

        app = App()
        router = Router()
        router.get("/hello", hello)
        app.use(router.routes())

    Thread safety:
        The freeze transition uses a Lock + double-check so exactly one
        thread composes the pipeline, even when several ASGI workers call
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "_pipeline",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._pipeline: Middleware | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Middleware --

    def use(self, middleware: Middleware) -> App:
        """Append a middleware to the pipeline."""
        self._check_not_frozen()
        if not callable(middleware):
            raise InvalidMiddlewareType
        self._middleware_list.append(middleware)
        return self

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        The handler receives ``(ctx, exc)``, ``(ctx)`` or nothing, and may
        set ``ctx.body`` or return the body::

            @app.error(405)
            def not_allowed(ctx, exc):
                return {"error": "method not allowed", "allow": exc.allow}
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run during ASGI lifespan startup."""
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run during ASGI lifespan shutdown."""
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._pipeline is not None

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self._pipeline,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._pipeline = compose(self._middleware_list)
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after it has started handling requests."
            raise ConfigurationError(msg)
