"""
Exception handlers mapping domain errors to the response envelope.
"""

from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from eventfinder.core.exceptions import AppError
from eventfinder.core.logging import get_logger

logger = get_logger(__name__)

ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


def envelope(message: str, status_code: int, error: Any = None) -> JSONResponse:
    content = {"message": message, "status": status_code}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, AppError) else AppError(str(exc))
    if error.status_code >= 500:
        logger.error("request_error", error=error.message, error_type=type(error).__name__)
    return envelope(error.message, error.status_code, error=type(error).__name__)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return envelope("Invalid request", status.HTTP_400_BAD_REQUEST, error=errors)


async def http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = getattr(exc, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return envelope(str(getattr(exc, "detail", "Error")), status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error=str(exc), error_type=type(exc).__name__)
    return envelope("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR, error="InternalError")


EXCEPTION_HANDLERS: dict[Any, ExceptionHandler] = {
    AppError: app_error_handler,
    RequestValidationError: validation_error_handler,
    StarletteHTTPException: http_error_handler,
    Exception: unhandled_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
