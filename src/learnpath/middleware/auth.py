"""
API Token Authentication Middleware.

Protects /api/* routes with Bearer token authentication.
Public endpoints (/health, docs) are not protected.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from learnpath.config import get_settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class APITokenMiddleware(BaseHTTPMiddleware):
    """
    Middleware that enforces API token authentication for /api/* routes.

    - Requires Authorization: Bearer <API_TOKEN> header
    - Skips authentication for public endpoints and CORS preflight
    - Returns 401 with an {"error": ...} body if token is missing or invalid
    """

    # Paths that don't require authentication
    PUBLIC_PATHS = frozenset([
        "/health",
        "/docs",
        "/openapi.json",
        "/redoc",
    ])

    PROTECTED_PREFIX = "/api/"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process the request and check authentication for protected routes."""
        path = request.url.path

        if request.method == "OPTIONS" or not self._is_protected_path(path):
            return await call_next(request)

        settings = get_settings()

        # If no API token configured, allow all requests (dev mode)
        if not settings.api_token:
            return await call_next(request)

        auth_header = request.headers.get("Authorization")

        if not auth_header:
            logger.warning("Missing Authorization header for %s", path)
            return self._unauthorized("Missing Authorization header")

        if not auth_header.startswith(BEARER_PREFIX):
            logger.warning("Invalid Authorization format for %s", path)
            return self._unauthorized("Invalid Authorization format. Use: Bearer <token>")

        token = auth_header[len(BEARER_PREFIX):]

        if token != settings.api_token:
            logger.warning("Invalid API token for %s", path)
            return self._unauthorized("Invalid API token")

        return await call_next(request)

    def _is_protected_path(self, path: str) -> bool:
        """Check if path requires a token."""
        if path in self.PUBLIC_PATHS:
            return False
        return path.startswith(self.PROTECTED_PREFIX)

    @staticmethod
    def _unauthorized(message: str) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": message})
