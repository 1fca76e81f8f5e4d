"""
Application error taxonomy and its mapping onto HTTP responses.

Every failure a client can observe is raised as an ``AppError``. The
exception handlers registered by ``register_error_handlers`` turn it into
the single wire shape ``{"error": code, "message": ..., "details": ...}``.
Underlying causes are chained and logged, never serialized.
"""
import enum
import logging
from typing import Any, NamedTuple, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    INVALID_INPUT = "invalid_input"
    INVALID_CREDENTIALS = "invalid_credentials"
    DUPLICATE_IDENTITY = "duplicate_identity"
    UNAUTHENTICATED = "unauthenticated"
    INTERNAL = "internal"


class ErrorSpec(NamedTuple):
    code: str
    message: str
    status_code: int


ERROR_TABLE = {
    ErrorKind.INVALID_INPUT: ErrorSpec("VALIDATION_ERROR", "Invalid input parameters", status.HTTP_400_BAD_REQUEST),
    ErrorKind.INVALID_CREDENTIALS: ErrorSpec("AUTH_INVALID", "Invalid credentials", status.HTTP_401_UNAUTHORIZED),
    ErrorKind.DUPLICATE_IDENTITY: ErrorSpec("DB_DUPLICATE", "Resource already exists", status.HTTP_409_CONFLICT),
    ErrorKind.UNAUTHENTICATED: ErrorSpec("AUTH_REQUIRED", "Authentication required", status.HTTP_401_UNAUTHORIZED),
    ErrorKind.INTERNAL: ErrorSpec("INTERNAL_ERROR", "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR),
}


class AppError(Exception):
    """A client-visible failure: stable code, safe message, optional details, HTTP status."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None, details: Any = None):
        entry = ERROR_TABLE[kind]
        self.kind = kind
        self.code = entry.code
        self.message = message or entry.message
        self.details = details
        self.status_code = entry.status_code
        super().__init__(f"{self.code}: {self.message}")

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


def wrap_db_error(exc: SQLAlchemyError) -> AppError:
    """Translate a database failure into an AppError without exposing its cause.

    Unique-constraint violations become DUPLICATE_IDENTITY; the only unique
    column is the email. Anything else is INTERNAL.
    """
    if isinstance(exc, IntegrityError):
        return AppError(ErrorKind.DUPLICATE_IDENTITY, details={"field": "email"})
    return AppError(ErrorKind.INTERNAL, message="Database operation failed")


# Reason codes reported per field when request binding fails
_FIELD_REASONS = {
    ("email", "value_error"): "invalid_email_format",
}


def _validation_details(exc: RequestValidationError) -> dict:
    details = {}
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if part != "body"]
        field = str(loc[0]) if loc else "body"
        err_type = err.get("type", "")
        if err_type == "missing":
            reason = f"missing_{field}"
        else:
            reason = _FIELD_REASONS.get((field, err_type), f"invalid_{field}")
        details.setdefault(field, [])
        if reason not in details[field]:
            details[field].append(reason)
    return details


def error_response(err: AppError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    cause = exc.__cause__
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "request failed: code=%s path=%s cause=%r", exc.code, request.url.path, cause,
            exc_info=cause,
        )
    else:
        logger.info("request rejected: code=%s path=%s", exc.code, request.url.path)
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _validation_details(exc)
    logger.warning("validation failed: path=%s details=%s", request.url.path, details)
    return error_response(AppError(ErrorKind.INVALID_INPUT, details=details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected error: path=%s", request.url.path, exc_info=exc)
    return error_response(AppError(ErrorKind.INTERNAL, message="An unexpected error occurred"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
