from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request and one per response, with timing"""

    def __init__(self, app, skip_prefixes=()):
        super().__init__(app)
        # e.g. the media proxy, which is hit once per embedded image
        self.skip_prefixes = tuple(skip_prefixes)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if self.skip_prefixes and path.startswith(self.skip_prefixes):
            return await call_next(request)

        start_time = time.time()
        method = request.method
        query_string = request.url.query
        logger.info(f"Request: {method} {path}{'?' + query_string if query_string else ''}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"Response: {response.status_code} for {method} {path} in {process_time:.4f}s")
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
