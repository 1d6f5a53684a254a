"""
Middleware stack for the FastAPI application.
"""
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from strideboard.core.config import settings
from strideboard.core.logger import bind_request_context, clear_request_context, logger
from strideboard.core.metrics import PrometheusMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Honour a caller-supplied request ID, otherwise generate one
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        clear_request_context()
        bind_request_context(request_id=request_id)

        start_time = time.time()
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                duration_ms=round((time.time() - start_time) * 1000, 2)
            )
            raise

        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2)
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware for adding security headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


def setup_middleware(app: FastAPI) -> None:
    """Setup all middleware for the FastAPI application."""

    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER]
    )

    if settings.metrics_enabled:
        app.add_middleware(PrometheusMiddleware)

    # Added last so it wraps everything above and the request ID is bound first
    app.add_middleware(LoggingMiddleware)

    logger.info("Middleware stack configured successfully")
