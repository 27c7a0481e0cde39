"""
Monitoring and observability infrastructure.
"""

from glaneur.infrastructure.monitoring import metrics
from glaneur.infrastructure.monitoring.logger import (
    get_logger,
    get_request_id,
    log_performance,
    new_request_id,
    set_request_id,
    setup_logging,
)

__all__ = [
    "metrics",
    "get_logger",
    "get_request_id",
    "new_request_id",
    "set_request_id",
    "setup_logging",
    "log_performance",
]
