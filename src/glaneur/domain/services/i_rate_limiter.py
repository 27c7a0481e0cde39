"""
Collect rate limiter interface.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IRateLimiter(ABC):
    """
    All-must-pass collect limits: per-user burst, per-user daily and
    per-IP daily.
    """

    @abstractmethod
    async def check_and_consume(self, user_id: str, client_ip: Optional[str]) -> None:
        """
        Check every limit and consume one unit from each if all pass.

        A rejected attempt consumes nothing.

        Args:
            user_id: Collecting user
            client_ip: Client IP, or None when unknown (IP limit skipped)

        Raises:
            RateLimitedError: If any limit is exhausted
        """
