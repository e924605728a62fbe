"""Middleware package."""

from flagsync.api.middleware.request_id import RequestIdMiddleware, REQUEST_ID_HEADER
from flagsync.api.middleware.logging import LoggingMiddleware

__all__ = [
    "RequestIdMiddleware",
    "REQUEST_ID_HEADER",
    "LoggingMiddleware",
]
