"""Request logging middleware."""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("pagecraft.api")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Logs the method and path of each request with a short request id, then the
    response status and timing. Gesture moves arrive at pointer rate, so they
    are logged at debug level.
    """

    def __init__(
        self,
        app,
        exclude_paths: list[str] | None = None,
        quiet_suffixes: list[str] | None = None,
    ):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health"]
        self.quiet_suffixes = quiet_suffixes or ["/move"]

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request with logging."""
        path = request.url.path
        if any(path.endswith(p) for p in self.exclude_paths):
            return await call_next(request)

        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.time()
        method = request.method
        quiet = any(path.endswith(s) for s in self.quiet_suffixes)

        logger.log(logging.DEBUG if quiet else logging.INFO, f"[{request_id}] {method} {path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = (time.time() - start_time) * 1000
            logger.error(f"[{request_id}] {method} {path} - ERROR - {duration:.2f}ms - {str(e)}")
            raise

        duration = (time.time() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.DEBUG if quiet else logging.INFO

        logger.log(log_level, f"[{request_id}] {method} {path} - {status} - {duration:.2f}ms")

        response.headers["X-Request-ID"] = request_id
        return response
