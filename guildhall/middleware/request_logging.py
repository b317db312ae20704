from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        query_string = request.url.query

        if query_string:
            logger.info(f"Request: {method} {path}?{query_string}")
        else:
            logger.info(f"Request: {method} {path}")

        response = await call_next(request)

        elapsed = time.perf_counter() - start_time
        logger.info(f"Response: {method} {path} -> {response.status_code} in {elapsed:.4f}s")

        return response
