"""
Collect pipeline exceptions.
"""

from glaneur.domain.exceptions.base import GlaneurException


class RateLimitedError(GlaneurException):
    """Raised when a collect attempt exceeds one of the rate limits."""

    def __init__(self, scope: str, retry_after: int, message: str):
        """
        Initialize rate limited error.

        Args:
            scope: Limit that was hit (burst, user_daily, ip_daily)
            retry_after: Seconds until the window rolls over
            message: Human readable explanation
        """
        super().__init__(message, code="RATE_LIMITED")
        self.scope = scope
        self.retry_after = retry_after


class CollectSupersededError(GlaneurException):
    """Raised when a collect attempt was failed before it could broadcast."""

    def __init__(self, collection_id: str):
        super().__init__(
            "Collect attempt expired before it was sent, please try again",
            code="CONFLICT",
        )
        self.collection_id = collection_id
