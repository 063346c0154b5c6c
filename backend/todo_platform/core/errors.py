"""
Error taxonomy shared by both services.

Services raise these; the handlers registered by register_exception_handlers
turn them into the failure envelope {"success": false, "error": {"message"}}.
The HTTP status code is the primary error-kind signal.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation error"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class MissingTokenError(AuthError):
    message = "Access token required"


class InvalidTokenError(AuthError):
    message = "Invalid or expired token"


class UnauthorizedError(AppError):
    # Same message whether or not the email exists
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Email already registered"


class NotFoundError(AppError):
    # Also raised for resources owned by someone else
    status_code = status.HTTP_404_NOT_FOUND
    message = "Todo not found"


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"message": message}},
        headers=headers,
    )


def format_validation_errors(errors: list[dict[str, Any]]) -> str:
    """
    Reduce pydantic's error list to one human-readable message.

    Messages raised by our own validators are passed through untouched;
    missing fields become "<Field> is required".
    """
    if not errors:
        return "Validation error"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = loc[-1] if loc else ""

    if first.get("type") == "json_invalid":
        return "Malformed JSON body"
    if first.get("type") == "missing" and field:
        return f"{field.capitalize()} is required"

    ctx_error = (first.get("ctx") or {}).get("error")
    if isinstance(ctx_error, ValueError):
        return str(ctx_error)

    msg = first.get("msg", "Validation error")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    """Install envelope-producing handlers on an app"""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
        return error_response(exc.status_code, message, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        # Never leak internals to the caller
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
