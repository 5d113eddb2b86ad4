"""Application-level error types and the JSON error envelope.

Every failure leaves the API as::

    {"error": {"code": "...", "message": "...", "request_id": "..."}}
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes returned to API clients."""

    BAD_REQUEST = "BAD_REQUEST"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Document pipeline
    NO_EXTRACTABLE_TEXT = "NO_EXTRACTABLE_TEXT"
    DOCUMENT_READ_ERROR = "DOCUMENT_READ_ERROR"
    TRANSLATION_TIMEOUT = "TRANSLATION_TIMEOUT"
    TRANSLATION_FAILED = "TRANSLATION_FAILED"
    RENDERING_ERROR = "RENDERING_ERROR"

    INTERNAL_ERROR = "INTERNAL_ERROR"


DEFAULT_STATUS: dict[ErrorCode, int] = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NO_EXTRACTABLE_TEXT: 400,
    ErrorCode.DOCUMENT_READ_ERROR: 400,
    ErrorCode.TRANSLATION_TIMEOUT: 504,
    ErrorCode.TRANSLATION_FAILED: 502,
    ErrorCode.RENDERING_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Codes used for plain HTTPExceptions raised by FastAPI or dependencies
_CODE_BY_STATUS: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    422: ErrorCode.VALIDATION_ERROR,
}


class AppError(Exception):
    """Error carrying an API code; the HTTP status defaults from the code."""

    def __init__(
        self,
        *,
        code: ErrorCode,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code or DEFAULT_STATUS.get(code, 500)
        self.details = details


def code_for_status(status_code: int) -> ErrorCode:
    """Error code for a bare HTTP status."""
    if status_code in _CODE_BY_STATUS:
        return _CODE_BY_STATUS[status_code]
    return ErrorCode.BAD_REQUEST if 400 <= status_code < 500 else ErrorCode.INTERNAL_ERROR


def error_payload(
    code: ErrorCode,
    message: str,
    request_id: str | None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {
        "code": code.value,
        "message": message,
        "request_id": request_id,
    }
    if details:
        error["details"] = details
    return {"error": error}


def build_error_response(
    *,
    request: Request,
    code: ErrorCode,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Builds the error envelope, tagged with the request's id."""
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status_code,
        content=error_payload(code, message, request_id, details),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s on %s: %s", exc.code.value, request.url.path, exc.message)
    return build_error_response(
        request=request,
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wraps HTTPException (404s, 405s, auth failures) in the envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return build_error_response(
        request=request,
        code=code_for_status(exc.status_code),
        message=message,
        status_code=exc.status_code,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return build_error_response(
        request=request,
        code=ErrorCode.VALIDATION_ERROR,
        message="Request validation failed",
        status_code=422,
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Last resort: log the traceback, return a generic 500."""
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    return build_error_response(
        request=request,
        code=ErrorCode.INTERNAL_ERROR,
        message="Internal server error",
        status_code=500,
    )
