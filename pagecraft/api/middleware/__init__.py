"""API middleware for Pagecraft."""

from pagecraft.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
