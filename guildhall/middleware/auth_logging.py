from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        # Every mutating endpoint needs a session
        if request.method != "GET" and not request.headers.get("Authorization"):
            logger.debug(f"{request.method} {path} called without auth header")

        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in (401, 403):
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
