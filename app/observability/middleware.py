from __future__ import annotations

import uuid
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from app.observability.performance import track_performance


class RequestContextMiddleware:
    """Binds request context and times every HTTP request with a tracker.

    The tracker's start/executed events carry ``"<METHOD> <path>"`` as their
    method name; one more event records the response status.
    """

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        method = scope.get("method")
        path = scope.get("path")

        structlog.contextvars.bind_contextvars(request_id=request_id, path=path, method=method)
        logger = structlog.get_logger("access")
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        tracker = track_performance(logger, method_name=f"{method} {path}")
        try:
            async with tracker:
                await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                f"HTTP {method} {path} responded {status_code} in {tracker.elapsed_ms}ms",
                status_code=status_code,
                elapsed_ms=tracker.elapsed_ms,
            )
            structlog.contextvars.clear_contextvars()
