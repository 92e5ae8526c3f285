"""Application error types and the handlers that turn them into JSON.

Every error leaves the API as ``{"message": ..., "statusCode": ...}``.
"""
import logging
import traceback

import config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("snaplinks.errors")


class AppError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"

class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"

class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"

class NotFound(AppError):
    status_code = 404
    default_message = "Not found"

class UniquenessViolation(AppError):
    """A row with the same short id already exists."""
    status_code = 409
    default_message = "Short id already taken"

class TooManyRequests(AppError):
    status_code = 429
    default_message = "Too many requests, please try again later."

class AllocationExhausted(AppError):
    status_code = 500
    default_message = "Failed to generate a unique short id"

class StoreUnavailable(AppError):
    status_code = 500
    default_message = "Internal Server Error"


def error_response(
    message: str, status_code: int, exc: Exception | None = None, headers: dict | None = None
) -> JSONResponse:
    body = {"message": message, "statusCode": status_code}
    if exc is not None and status_code >= 500 and config.ENVIRONMENT == "dev":
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = err.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        messages.append(msg.removeprefix("Value error, "))
    return ", ".join(messages) or ValidationError.default_message


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return error_response(exc.message, exc.status_code, exc)

async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(_validation_message(exc), 400)

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))

async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    err = StoreUnavailable()
    return error_response(err.message, err.status_code, exc)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
