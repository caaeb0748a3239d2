"""Security headers middleware for FastAPI.

Adds recommended security headers to every response. HSTS and the strict
Content-Security-Policy are only sent outside debug mode.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from portal.core.config import get_settings

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

# JSON API: nothing should be framed, scripted or embedded
PRODUCTION_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
DEBUG_CSP = "default-src 'self' 'unsafe-inline' data: https://cdn.jsdelivr.net"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        settings = get_settings()

        for name, value in BASE_HEADERS.items():
            response.headers[name] = value

        if settings.debug:
            # Swagger UI assets load from a CDN
            response.headers["Content-Security-Policy"] = DEBUG_CSP
        else:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
            response.headers["Content-Security-Policy"] = PRODUCTION_CSP

        return response
