# minigram/core/errors.py
"""
Errores de dominio.

Los services lanzan estas excepciones y `register_error_handlers` las
convierte en el sobre JSON que espera el front:

    {"success": false, "message": "..."}
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from minigram.core.json import UTF8JSONResponse

log = logging.getLogger("uvicorn")


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized access, please login first"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized to perform this action"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Conflict(AppError):
    # el front trata los duplicados como 400
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Conflict"


class AlreadyRegistered(Conflict):
    message = "User already registered"


class AlreadyLiked(Conflict):
    message = "You already liked this post"


class NotLiked(Conflict):
    message = "You haven't liked this post"


class AlreadyFollowing(Conflict):
    message = "You are already following this user"


class NotFollowing(Conflict):
    message = "You are not following this user"


class InvalidOperation(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid operation"


class ExternalServiceError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "External service error"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


def _describe_validation(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    # loc = ("body", "caption") → "caption"
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc)
    msg = first.get("msg", "invalid value")
    return f"{field}: {msg}" if field else msg


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            log.error("❌ %s %s → %s", request.method, request.url.path, exc.message)
        return UTF8JSONResponse.error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return UTF8JSONResponse.error(ValidationError.status_code, _describe_validation(exc))

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return UTF8JSONResponse.error(
            exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("❌ unhandled error on %s %s", request.method, request.url.path)
        return UTF8JSONResponse.error(InternalError.status_code, InternalError.message)
