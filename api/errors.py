"""
Module 08 - API Error Handling

Every failure leaves the API in the same envelope:

    {"ok": false, "error": {"code": ..., "message": ..., "details": {...}}}

Domain exceptions keep their code; the HTTP status is derived from it.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorDetail, ErrorResponse
from core.schemas.errors import CoverPassException, ErrorCodes


logger = logging.getLogger(__name__)


# Anything not listed is a client error
HTTP_STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.UNAUTHORIZED: 403,
    ErrorCodes.BLOCK_NOT_FOUND: 404,
    ErrorCodes.TREE_NOT_FOUND: 404,
    ErrorCodes.LEAF_NOT_FOUND: 404,
    ErrorCodes.ROOT_CHAIN_BROKEN: 409,
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details or {}))
    return JSONResponse(status_code=status_code, content=body.model_dump())


class APIError(Exception):
    """Request-level failure raised by a route, outside the domain taxonomy."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidRequestError(APIError):
    """Well-formed JSON whose values the route cannot act on."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__("INVALID_REQUEST", message, status_code=400, details=details)


def status_for(exc: CoverPassException) -> int:
    return HTTP_STATUS_BY_CODE.get(exc.code, 400)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def coverpass_error_handler(request: Request, exc: CoverPassException) -> JSONResponse:
    status_code = status_for(exc)
    logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.code)
    return error_response(status_code, **exc.to_dict())


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        500,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        {"type": type(exc).__name__},
    )
