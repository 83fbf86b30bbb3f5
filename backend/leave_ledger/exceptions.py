import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception.

    ``kind`` is the stable error name clients switch on; it defaults to the
    class-level value so subclasses only need to set it once.
    """

    kind: str = "AppError"
    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        super().__init__(self.message)


class NotFoundError(AppError):
    """Employee, leave request or notification does not exist."""

    kind = "NotFound"
    default_status = status.HTTP_404_NOT_FOUND


class LedgerValidationError(AppError):
    """Input or precondition is invalid (missing designation, bad dates, inactive employee)."""

    kind = "ValidationError"
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidLeaveTypeError(AppError):
    kind = "InvalidLeaveType"
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class AlreadyApprovedError(AppError):
    kind = "AlreadyApproved"
    default_status = status.HTTP_409_CONFLICT


class AlreadyCancelledError(AppError):
    kind = "AlreadyCancelled"
    default_status = status.HTTP_409_CONFLICT


class InvalidTransitionError(AppError):
    """The request's current status does not allow the action."""

    kind = "InvalidTransition"
    default_status = status.HTTP_409_CONFLICT


class CancellationConflictError(AppError):
    """The cancellation sub-state does not allow the action."""

    kind = "CancellationConflict"
    default_status = status.HTTP_409_CONFLICT


class ConflictError(AppError):
    """Uniqueness violation outside the ledger (duplicate employee ID or email)."""

    kind = "Conflict"
    default_status = status.HTTP_409_CONFLICT


class InsufficientBalanceError(AppError):
    kind = "InsufficientBalance"
    default_status = status.HTTP_400_BAD_REQUEST


class WindowExpiredError(AppError):
    kind = "WindowExpired"
    default_status = status.HTTP_400_BAD_REQUEST


class AlreadyStartedError(AppError):
    kind = "AlreadyStarted"
    default_status = status.HTTP_400_BAD_REQUEST


class ForbiddenError(AppError):
    kind = "Forbidden"
    default_status = status.HTTP_403_FORBIDDEN


class StoreConflictError(AppError):
    """Transaction lost a race or the store refused the write. Not retried."""

    kind = "StoreConflict"
    default_status = status.HTTP_409_CONFLICT


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.kind,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="InternalError",
            detail="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
