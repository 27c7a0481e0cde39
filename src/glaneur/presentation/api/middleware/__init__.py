"""API middleware and request guards."""

from glaneur.presentation.api.middleware.auth import get_current_identity
from glaneur.presentation.api.middleware.client_ip import get_client_ip
from glaneur.presentation.api.middleware.error_handler import (
    glaneur_exception_handler,
    http_exception_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from glaneur.presentation.api.middleware.metrics_middleware import (
    MetricsMiddleware,
)
from glaneur.presentation.api.middleware.request_id_middleware import (
    RequestIDMiddleware,
)

__all__ = [
    "MetricsMiddleware",
    "RequestIDMiddleware",
    "get_client_ip",
    "get_current_identity",
    "glaneur_exception_handler",
    "http_exception_handler",
    "request_validation_handler",
    "unhandled_exception_handler",
]
