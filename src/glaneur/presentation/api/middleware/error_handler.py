"""
Global error handling.

Every failure leaves the API as the error envelope
{success: false, error: {code, message}, requestId}. The HTTP status is
derived from the structured error code only.
"""

from typing import Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from glaneur.domain.exceptions import GlaneurException, RateLimitedError
from glaneur.infrastructure.monitoring import get_logger, new_request_id

logger = get_logger(__name__)

STATUS_CODE_MAP: Dict[str, int] = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "SIGNATURE_INVALID": status.HTTP_401_UNAUTHORIZED,
    "AUTH_REQUIRED": status.HTTP_401_UNAUTHORIZED,
    "AUTH_INVALID": status.HTTP_401_UNAUTHORIZED,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    "UPSTREAM_ERROR": status.HTTP_502_BAD_GATEWAY,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"

API_VERSION = "1"


def request_id_of(request: Request) -> str:
    """Request id assigned by RequestIDMiddleware, or a fresh one."""
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = new_request_id()
        request.state.request_id = request_id
    return request_id


def error_response(
    request: Request,
    code: str,
    message: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the error envelope for a code."""
    request_id = request_id_of(request)
    response_headers = {
        "X-Request-ID": request_id,
        "X-Api-Version": API_VERSION,
        "Cache-Control": "no-store",
    }
    if headers:
        response_headers.update(headers)

    return JSONResponse(
        status_code=STATUS_CODE_MAP.get(
            code, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": request_id,
        },
        headers=response_headers,
    )


async def glaneur_exception_handler(
    request: Request, exc: GlaneurException
) -> JSONResponse:
    """
    Handle Glaneur domain exceptions.

    Codes missing from STATUS_CODE_MAP are reported as INTERNAL_ERROR
    so unexpected messages never leak.
    """
    if exc.code not in STATUS_CODE_MAP or exc.code == "INTERNAL_ERROR":
        logger.error(
            "Unmapped domain error",
            extra={"code": exc.code, "error": exc.message},
        )
        return error_response(request, "INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE)

    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}

    return error_response(request, exc.code, exc.message, headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map FastAPI body/path validation failures to VALIDATION_ERROR."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(
            str(part) for part in first.get("loc", ()) if part != "body"
        )
        message = f"{location}: {first.get('msg')}" if location else first.get(
            "msg", message
        )
    return error_response(request, "VALIDATION_ERROR", message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap routing errors (unknown path, wrong method) in the envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(request, "NOT_FOUND", "Resource not found")
    if exc.status_code < 500:
        response = error_response(request, "VALIDATION_ERROR", str(exc.detail))
        response.status_code = exc.status_code
        return response
    return error_response(request, "INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE)


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Last resort: log with the request id, never expose internals."""
    request_id = request_id_of(request)
    logger.exception(
        "Unhandled error",
        extra={"request_id": request_id, "path": request.url.path},
    )
    return error_response(request, "INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE)
