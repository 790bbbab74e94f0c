"""Shared-secret authentication for the user management API."""
from __future__ import annotations

import logging
import secrets
from typing import Optional

from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocketClose

from .errors import AuthError, ConfigError, UserAPIError

API_KEY_HEADER = "X-API-KEY"
DOCS_PREFIX = "/swagger"

logger = logging.getLogger("userapi.security")


def keys_match(provided: Optional[str], expected: str) -> bool:
    """Exact, case-sensitive comparison performed in constant time."""

    if provided is None:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


class APIKeyMiddleware:
    """Reject requests that do not carry the configured API key.

    Paths under ``exempt_prefix`` (the interactive documentation) are passed
    through untouched.  When no key is configured every other request is
    answered with a 500.  Websocket handshakes are gated as well and are
    closed with code 4401 (bad key) or 1011 (no key configured).
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        api_key: Optional[str],
        header_name: str = API_KEY_HEADER,
        exempt_prefix: str = DOCS_PREFIX,
    ) -> None:
        self.app = app
        self._api_key = api_key
        self._header_name = header_name
        self._exempt_prefix = exempt_prefix

    def authenticate(self, provided: Optional[str]) -> None:
        expected = self._api_key
        if expected is None or not expected.strip():
            raise ConfigError("Server ApiKey is not configured.")
        if not keys_match(provided, expected):
            raise AuthError("Missing or invalid API key.")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        path: str = scope.get("path", "")
        if path.startswith(self._exempt_prefix):
            await self.app(scope, receive, send)
            return

        # A repeated header is never an exact match for the configured key.
        values = Headers(scope=scope).getlist(self._header_name)
        try:
            self.authenticate(values[0] if len(values) == 1 else None)
        except UserAPIError as exc:
            method = scope.get("method", "WEBSOCKET")
            if isinstance(exc, ConfigError):
                logger.error("Rejected %s %s: no API key configured", method, path)
            else:
                logger.warning("Rejected %s %s: missing or invalid API key", method, path)
            if scope["type"] == "websocket":
                code = 4401 if isinstance(exc, AuthError) else 1011
                await WebSocketClose(code=code, reason=str(exc))(scope, receive, send)
                return
            response = PlainTextResponse(str(exc), status_code=exc.status_code)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)


__all__ = ["API_KEY_HEADER", "DOCS_PREFIX", "APIKeyMiddleware", "keys_match"]
