"""
Access Logging Middleware

Logs every API request with its duration and tags the response with a
request ID for correlation.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from agencydesk.core.logging import get_logger

logger = get_logger(__name__)

SKIPPED_PATHS = ("/", "/health", "/docs", "/openapi.json")


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log API access.

    Captures:
    - Request details (method, path, client IP)
    - Response status and duration
    - Request tracking (X-Request-ID, reused when the caller sends one)
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_request_seconds: float = 1.0):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            enabled: Whether logging is enabled (can be disabled in tests)
            slow_request_seconds: Requests slower than this are logged as warnings
        """
        super().__init__(app)
        self.enabled = enabled
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        if not self.enabled or request.url.path in SKIPPED_PATHS:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        message = (
            f"{request.method} {request.url.path} {response.status_code} "
            f"{duration * 1000:.0f}ms ip={self._get_client_ip(request)} request_id={request_id}"
        )
        if duration > self.slow_request_seconds:
            logger.warning(f"Slow request: {message}")
        elif response.status_code >= 500:
            logger.error(message)
        else:
            logger.info(message)

        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address from request.

        Checks X-Forwarded-For header first (for proxied requests),
        then falls back to direct client IP.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
