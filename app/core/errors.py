"""Operational errors and the single normalization point for every failed request.

Handlers and dependencies raise ``AppError`` (or let library errors propagate);
``register_exception_handlers`` installs one FastAPI exception handler per
error family, each of which funnels into ``normalize_error`` and
``render_error``. The client-facing body is::

    {"status": "fail" | "error", "message": "..."}

In dev mode the body also carries ``kind``, ``error`` and ``stack``. In prod
mode non-operational failures only ever show a generic message.
"""

import enum
import logging
import traceback
from typing import Any

import jwt
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went very wrong"
DUPLICATE_MESSAGE = "Duplicate field value. Please use another value."
INVALID_TOKEN_MESSAGE = "Invalid token. Please log in again"
EXPIRED_TOKEN_MESSAGE = "Your token has expired. Please log in again"

# Postgres SQLSTATE for unique_violation.
PG_UNIQUE_VIOLATION = "23505"


class ErrorKind(str, enum.Enum):
    """Category of a normalized failure."""

    OPERATIONAL = "operational"
    CAST = "cast"
    DUPLICATE = "duplicate"
    VALIDATION = "validation"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    INTERNAL = "internal"


class AppError(Exception):
    """Expected business failure with a status code and a client-safe message."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        kind: ErrorKind = ErrorKind.OPERATIONAL,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.kind = kind
        super().__init__(message)

    @property
    def is_operational(self) -> bool:
        return self.kind is not ErrorKind.INTERNAL

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"


class BadRequestError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class UnauthenticatedError(AppError):
    def __init__(self, message: str, kind: ErrorKind = ErrorKind.OPERATIONAL) -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, kind)


class ForbiddenError(AppError):
    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


def _field_name(loc: tuple[Any, ...]) -> str:
    """Drop the 'body'/'query'/'path' prefix from a pydantic error location."""
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _from_request_validation(exc: RequestValidationError) -> AppError:
    errors = exc.errors()
    for err in errors:
        loc = tuple(err.get("loc", ()))
        if loc and loc[0] == "path":
            return AppError(
                f"Invalid {_field_name(loc)}: {err.get('input')}",
                status.HTTP_400_BAD_REQUEST,
                ErrorKind.CAST,
            )
    messages = []
    for err in errors:
        field = _field_name(tuple(err.get("loc", ())))
        msg = err.get("msg", "invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return AppError(
        "Invalid input data. " + ". ".join(messages),
        status.HTTP_400_BAD_REQUEST,
        ErrorKind.VALIDATION,
    )


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    text = str(orig).lower()
    return "unique" in text or "duplicate" in text


def normalize_error(exc: Exception) -> AppError:
    """Map any failure raised while handling a request to a tagged AppError."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, RequestValidationError):
        return _from_request_validation(exc)
    if isinstance(exc, StarletteHTTPException):
        # Unknown route, wrong method and other framework-level rejections.
        return AppError(str(exc.detail), exc.status_code)
    if isinstance(exc, IntegrityError):
        if _is_unique_violation(exc):
            return AppError(DUPLICATE_MESSAGE, status.HTTP_400_BAD_REQUEST, ErrorKind.DUPLICATE)
        return AppError(
            "Invalid input data. A referenced record does not exist or a required value is missing.",
            status.HTTP_400_BAD_REQUEST,
            ErrorKind.VALIDATION,
        )
    if isinstance(exc, jwt.ExpiredSignatureError):
        return AppError(EXPIRED_TOKEN_MESSAGE, status.HTTP_401_UNAUTHORIZED, ErrorKind.EXPIRED_TOKEN)
    if isinstance(exc, jwt.PyJWTError):
        return AppError(INVALID_TOKEN_MESSAGE, status.HTTP_401_UNAUTHORIZED, ErrorKind.INVALID_TOKEN)
    return AppError(GENERIC_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorKind.INTERNAL)


def render_error(err: AppError, exc: Exception, settings: Settings) -> JSONResponse:
    """Build the client response for a normalized error (verbose in dev, terse in prod)."""
    body: dict[str, Any] = {"status": err.status, "message": err.message}
    if settings.is_production:
        if not err.is_operational:
            body["message"] = GENERIC_ERROR_MESSAGE
    else:
        if not err.is_operational:
            body["message"] = str(exc) or GENERIC_ERROR_MESSAGE
        body["kind"] = err.kind.value
        body["error"] = repr(exc)
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    headers = {"WWW-Authenticate": "Bearer"} if err.status_code == 401 else None
    return JSONResponse(status_code=err.status_code, content=body, headers=headers)


async def _handle(request: Request, exc: Exception) -> JSONResponse:
    err = normalize_error(exc)
    log_extra = {
        "path": request.url.path,
        "method": request.method,
        "status_code": err.status_code,
        "error_kind": err.kind.value,
    }
    if err.is_operational:
        logger.info("Request failed: %s", err.message, extra=log_extra)
    else:
        logger.exception("Unexpected error while handling request", exc_info=exc, extra=log_extra)
    return render_error(err, exc, get_settings())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the normalizer for every error family on the app."""
    app.add_exception_handler(AppError, _handle)
    app.add_exception_handler(RequestValidationError, _handle)
    app.add_exception_handler(StarletteHTTPException, _handle)
    app.add_exception_handler(IntegrityError, _handle)
    app.add_exception_handler(jwt.PyJWTError, _handle)
    app.add_exception_handler(Exception, _handle)
