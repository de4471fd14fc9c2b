# middleware.py
"""
Middleware for request logging.
"""
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.logging import logger
from datetime import datetime

SLOW_REQUEST_SECONDS = 2.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = datetime.utcnow()

        client_ip = request.client.host if request.client else None

        response = await call_next(request)

        duration = (datetime.utcnow() - start_time).total_seconds()

        logger.info(
            f"Request: {request.method} {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Duration: {duration:.3f}s | "
            f"IP: {client_ip}"
        )

        # Render and SMTP work happens inside the request
        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} | "
                f"Duration: {duration:.3f}s | "
                f"IP: {client_ip}"
            )

        return response
