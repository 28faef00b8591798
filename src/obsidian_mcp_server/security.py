"""Security helpers for the HTTP transport of the MCP server."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Awaitable, Callable, Iterable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

SECRET_HEADER = "x-mcp-secret"
HEALTH_PATH = "/mcp/health"


class SharedSecretMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not carry the configured shared secret."""

    def __init__(
        self, app: ASGIApp, secret: str, exempt_paths: Iterable[str] = (HEALTH_PATH,)
    ) -> None:
        super().__init__(app)
        if not secret:
            raise ValueError("Shared secret must be configured")
        self._secret = secret.encode("utf-8")
        self._exempt_paths = frozenset(exempt_paths)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        provided = request.headers.get(SECRET_HEADER, "").encode("utf-8")
        if not hmac.compare_digest(provided, self._secret):
            logger.warning("Rejected request to %s: bad or missing secret", request.url.path)
            return JSONResponse({"detail": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)

        return await call_next(request)


def build_security_middleware(
    secret: str | None, health_path: str = HEALTH_PATH
) -> list[Middleware]:
    """Create the middleware stack for the HTTP transport.

    CORS is always installed. When a shared secret is configured it is
    required on every request except the health check.
    """

    middleware: list[Middleware] = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    ]

    if secret:
        middleware.insert(
            0, Middleware(SharedSecretMiddleware, secret=secret, exempt_paths=(health_path,))
        )

    return middleware
