"""Domain error taxonomy and the HTTP handlers that render it.

Every handler answers with ``{"detail": ..., "request_id": ...}`` so a failed
call can be matched to its log lines.
"""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.safeops.core.logging import get_logger

logger = get_logger(__name__)


class SafeOpsError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    public_detail: str | None = None

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def detail(self) -> str:
        return self.public_detail or self.message


class ValidationError(SafeOpsError):
    """Input rejected before any state change (e.g. severity out of range)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidTransitionError(ValidationError):
    """Requested transition is not in the transition table for the current state."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(SafeOpsError):
    """Entity does not exist within the caller's tenant."""

    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(SafeOpsError):
    """Actor lacks the required role.

    Rendered exactly like NotFoundError so callers cannot tell whether the row exists.
    """

    status_code = status.HTTP_404_NOT_FOUND
    public_detail = "Not found"


class PersistenceError(SafeOpsError):
    """Primary write failed; the transition was not applied."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    public_detail = "The change could not be saved, please retry"


class NotificationDispatchError(SafeOpsError):
    """Notification could not be handed off. Logged only, never propagated."""


class AggregationError(SafeOpsError):
    """Read/subscription failure in the tracker or aggregators."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def _error_response(status_code: int, detail: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "request_id": correlation_id.get(),
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(SafeOpsError)
    async def domain_exception_handler(request: Request, exc: SafeOpsError) -> JSONResponse:
        log = logger.warning if exc.status_code >= 500 else logger.info
        log(
            "Domain error",
            error_type=type(exc).__name__,
            error=exc.message,
            path=request.url.path,
            context={k: str(v) for k, v in exc.context.items()},
        )
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
