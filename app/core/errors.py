# Domain error taxonomy shared by every service module.
# Services raise these; app.main maps them to HTTP responses.

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("app")


class BlogError(Exception):
    """Base class for errors surfaced to API clients"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(BlogError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDeniedError(BlogError):
    """Not owner, not admin, suspended or not allowed by site settings"""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BlogError):
    """Referenced entity is absent or not visible to the caller"""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BlogError):
    """Uniqueness violation (slug, username, nickname, email)"""
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(BlogError):
    """The store rejected the write or is unavailable"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, blog_error_handler)
