"""
Error types and the exception handlers that render them.

Handlers raise ``APIError`` with a machine readable ``code``; the handlers
registered here turn it, framework HTTP errors, validation errors and any
unexpected exception into the standard response envelope.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dyc_api.utils import api_response

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"

_GENERIC_CODES = {
    400: "BAD_REQUEST",
    401: "NOT_AUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


class APIError(HTTPException):
    def __init__(self, status_code: int, message: str, code: str):
        super().__init__(status_code=status_code, detail=message)
        self.code = code


def bad_request(message: str, code: str) -> APIError:
    return APIError(400, message, code)


def unauthorized(message: str, code: str) -> APIError:
    return APIError(401, message, code)


def forbidden(message: str, code: str) -> APIError:
    return APIError(403, message, code)


def not_found(message: str, code: str) -> APIError:
    return APIError(404, message, code)


async def api_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = getattr(exc, "code", None) or _GENERIC_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {code} {message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=api_response(False, message, error=code),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    logger.info(f"Validation error on {request.url.path}: {fields}")
    return JSONResponse(
        status_code=400,
        content=api_response(False, "Datos de entrada inválidos", data={"fields": fields}, error="VALIDATION_ERROR"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=api_response(False, INTERNAL_ERROR_MESSAGE, error="INTERNAL_ERROR"),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
