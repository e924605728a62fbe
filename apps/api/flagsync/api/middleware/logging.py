"""
Access logging for SDK payload requests.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request.

    Records which capability override (if any) the SDK sent and the cache
    policy it was answered with, since both decide what a CDN ends up serving.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        log = logger.info if response.status_code < 500 else logger.error
        log(
            "Request completed",
            method=request.method,
            path=request.url.path,
            capabilities=request.query_params.get("capabilities"),
            status_code=response.status_code,
            cache_control=response.headers.get("Cache-Control"),
            duration_ms=round(duration_ms, 2),
        )
        return response
