"""
Challenge store interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from glaneur.domain.entities.challenge import Challenge


class IChallengeStore(ABC):
    """
    Storage for single-use sign-in challenges keyed by nonce.

    Consumption must be atomic: of any number of concurrent consumers
    of one nonce, exactly one sees the unconsumed challenge.
    """

    @abstractmethod
    async def save(self, challenge: Challenge) -> None:
        """
        Store a freshly issued challenge until it expires.

        Args:
            challenge: Challenge to store
        """

    @abstractmethod
    async def consume(self, nonce: str) -> Optional[Challenge]:
        """
        Atomically mark the challenge for a nonce as consumed.

        Args:
            nonce: Challenge nonce

        Returns:
            The challenge as it was before this call (its consumed flag
            tells whether it had already been used), or None if unknown
        """
