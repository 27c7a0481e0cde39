"""
Challenge stores.

Redis-backed store for multi-instance deployments and an in-memory
store for single-process and test use.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Dict, Optional

from glaneur.domain.entities.challenge import Challenge
from glaneur.domain.services.i_challenge_store import IChallengeStore
from glaneur.infrastructure.cache.redis_cache_client import RedisCacheClient

KEY_PREFIX = "siws:challenge:"


class RedisChallengeStore(IChallengeStore):
    """
    Challenges stored as JSON with a Redis TTL.

    Consumption deletes the key in a MULTI/EXEC so only one caller can
    observe it. A consumed or expired nonce is simply unknown afterwards.
    """

    def __init__(self, redis_client: RedisCacheClient):
        self.redis_client = redis_client

    async def save(self, challenge: Challenge) -> None:
        await self.redis_client.set(
            KEY_PREFIX + challenge.nonce,
            json.dumps(challenge.to_dict()),
            expire_seconds=max(1, challenge.ttl_seconds()),
        )

    async def consume(self, nonce: str) -> Optional[Challenge]:
        raw = await self.redis_client.pop(KEY_PREFIX + nonce)
        if raw is None:
            return None
        return Challenge.from_dict(json.loads(raw))


class InMemoryChallengeStore(IChallengeStore):
    """
    Process-local challenge store.

    Consumed challenges are kept until they expire so reuse is reported
    as such rather than as an unknown nonce.
    """

    def __init__(self):
        self._challenges: Dict[str, Challenge] = {}
        self._lock = asyncio.Lock()

    async def save(self, challenge: Challenge) -> None:
        async with self._lock:
            self._purge_expired()
            self._challenges[challenge.nonce] = challenge

    async def consume(self, nonce: str) -> Optional[Challenge]:
        async with self._lock:
            challenge = self._challenges.get(nonce)
            if challenge is None:
                return None
            if challenge.consumed:
                return challenge
            return challenge.consume()

    def _purge_expired(self) -> None:
        now = datetime.now(timezone.utc)
        expired = [n for n, c in self._challenges.items() if c.is_expired(now)]
        for nonce in expired:
            del self._challenges[nonce]

    def __len__(self) -> int:
        return len(self._challenges)
