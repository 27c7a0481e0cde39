"""
Request ID middleware for request tracking.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from glaneur.infrastructure.monitoring.logger import (
    new_request_id,
    set_request_id,
)
from glaneur.presentation.api.middleware.error_handler import API_VERSION

MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to generate and track request IDs.

    Reuses an incoming X-Request-ID, otherwise generates req_<12 hex>.
    Adds X-Request-ID, X-Api-Version and Cache-Control headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get("X-Request-ID", "").strip()
        if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH:
            request_id = incoming
        else:
            request_id = new_request_id()

        set_request_id(request_id)
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Api-Version"] = API_VERSION
        response.headers.setdefault("Cache-Control", "no-store")

        return response
