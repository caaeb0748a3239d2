"""Request logging middleware for FastAPI.

Every API request gets a short request id (echoed in X-Request-ID) and one
log line with:
- Action (HTTP method mapped to action name)
- Resource type and ID (from path)
- Response status and duration
- Client IP address and user agent

Workflow transitions are written to the audit_logs table by the
AuditLogSink; this middleware covers the request layer.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from portal.db.models.audit import AuditSeverity

logger = logging.getLogger(__name__)


# Map HTTP methods to action names
METHOD_TO_ACTION = {
    "GET": "read",
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}

# Paths that are not logged
EXCLUDED_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
}

_SEVERITY_TO_LEVEL = {
    AuditSeverity.DEBUG: logging.DEBUG,
    AuditSeverity.INFO: logging.INFO,
    AuditSeverity.WARNING: logging.WARNING,
    AuditSeverity.ERROR: logging.ERROR,
    AuditSeverity.CRITICAL: logging.WARNING,
}


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # First entry is the original client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def extract_resource_info(path: str) -> tuple[str, Optional[int]]:
    """
    Extract resource type and ID from request path.

    Returns:
        Tuple of (resource_type, resource_id)
    """
    parts = [p for p in path.strip("/").split("/") if p]
    if parts and parts[0] == "api":
        parts = parts[1:]
    if not parts:
        return "api", None

    resource_id = None
    if len(parts) > 1 and parts[1].isdigit():
        resource_id = int(parts[1])
    return parts[0], resource_id


def determine_severity(status_code: int, method: str) -> AuditSeverity:
    """Determine log severity based on response status and method."""
    if status_code >= 500:
        return AuditSeverity.ERROR
    elif status_code >= 400:
        if status_code in (401, 403):
            return AuditSeverity.CRITICAL  # Auth failures are security-relevant
        return AuditSeverity.WARNING
    elif method in ("POST", "DELETE", "PATCH", "PUT"):
        return AuditSeverity.INFO
    return AuditSeverity.DEBUG


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs each API request and tags it with a request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)

        duration_ms = int((time.time() - start_time) * 1000)
        resource_type, resource_id = extract_resource_info(request.url.path)
        severity = determine_severity(response.status_code, request.method)

        logger.log(
            _SEVERITY_TO_LEVEL[severity],
            "[%s] %s %s %s%s -> %d in %dms (ip=%s, agent=%s)",
            request_id,
            METHOD_TO_ACTION.get(request.method, request.method.lower()),
            resource_type,
            f"{resource_id} " if resource_id is not None else "",
            request.url.path,
            response.status_code,
            duration_ms,
            get_client_ip(request),
            request.headers.get("user-agent", ""),
        )

        response.headers["X-Request-ID"] = request_id
        return response
