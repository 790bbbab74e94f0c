"""Request logging middleware and logging setup."""
from __future__ import annotations

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("userapi.requests")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(numeric_level)
        return
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)


class RequestLoggingMiddleware:
    """Log method, path, status and latency for every HTTP request.

    The clock starts as soon as the request enters this middleware and stops
    once the final body chunk has been sent or the downstream app raised.  A
    request that fails before a response was started is logged as 500 and
    the exception is re-raised untouched.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "HTTP %s %s => %s in %.2fms",
                scope.get("method", "-"),
                scope.get("path", ""),
                status_code,
                elapsed_ms,
            )


__all__ = ["LOG_FORMAT", "RequestLoggingMiddleware", "configure_logging"]
