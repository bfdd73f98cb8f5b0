from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logger = logging.getLogger("app")

# Path prefixes that always require a bearer token
PROTECTED_PREFIXES = (
    f"{settings.API_V1_STR}/users/me",
    f"{settings.API_V1_STR}/admin",
)

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_auth = bool(request.headers.get("Authorization"))

        if not has_auth and path.startswith(PROTECTED_PREFIXES):
            logger.warning(f"Protected endpoint {path} accessed without auth header")

        response = await call_next(request)

        # 401/403 from the admin plane is worth a louder line
        if response.status_code in [401, 403]:
            if path.startswith(f"{settings.API_V1_STR}/admin"):
                logger.warning(f"Admin access denied: {response.status_code} on {request.method} {path}")
            else:
                logger.info(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
