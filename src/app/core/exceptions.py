"""Domain error taxonomy and the exception handlers that map it to HTTP.

Services raise these errors; routers let them propagate. Every error
response carries the request_id from the correlation middleware.
"""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.core.logging import get_logger

logger = get_logger(__name__)


class DomainError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAuthenticated(DomainError):
    """No active session for the request."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class PermissionDenied(DomainError):
    """The access policy rejected the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(DomainError):
    """The requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class DesignerNotFound(NotFound):
    """The id given for assignment does not resolve to a designer."""


class ValidationError(DomainError):
    """Malformed input, detected before any write."""

    status_code = 422


class Conflict(DomainError):
    """The write would violate a uniqueness rule."""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(DomainError):
    """The underlying store failed. Carries the store's message; never retried."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PartialFailure(DomainError):
    """A secondary step failed while the primary operation went through.

    Logged, never raised to HTTP callers. One that reaches the exception
    handler is a bug and is reported as an internal error.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        headers = None
        if isinstance(exc, NotAuthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        detail = exc.message
        if isinstance(exc, PersistenceError):
            logger.error("Persistence failure", path=request.url.path, error=exc.message)
        if isinstance(exc, PartialFailure):
            logger.error(
                "Partial failure escaped to HTTP", path=request.url.path, error=exc.message
            )
            detail = "Internal server error"
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": detail,
                "request_id": correlation_id.get(),
            },
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
