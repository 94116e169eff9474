"""Middleware for request processing."""

from .error_handler import error_handler_middleware
from .request_context import RequestContextMiddleware, get_request_id

__all__ = [
    "error_handler_middleware",
    "get_request_id",
    "RequestContextMiddleware",
]
