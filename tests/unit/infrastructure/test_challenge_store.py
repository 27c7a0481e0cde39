"""
Unit tests for challenge stores.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from glaneur.domain.entities.challenge import Challenge
from glaneur.infrastructure.auth.challenge_store import (
    KEY_PREFIX,
    InMemoryChallengeStore,
    RedisChallengeStore,
)

WALLET = "DYw8jCTfwHNRJhhmFcbXvVDTqWMEVFBX6ZKUmG5CNSKK"


def _challenge(nonce: str = "ab" * 32, ttl_seconds: int = 300, age: int = 0) -> Challenge:
    issued_at = datetime.now(timezone.utc) - timedelta(seconds=age)
    return Challenge(
        wallet_address=WALLET,
        nonce=nonce,
        message=f"Nonce: {nonce}",
        issued_at=issued_at,
        expires_at=issued_at + timedelta(seconds=ttl_seconds),
    )


class TestInMemoryChallengeStore:
    """Unit tests for InMemoryChallengeStore."""

    async def test_consume_once(self):
        """Test first consume gets the fresh challenge, second sees it used."""
        store = InMemoryChallengeStore()
        await store.save(_challenge())

        first = await store.consume("ab" * 32)
        second = await store.consume("ab" * 32)

        assert first.consumed is False
        assert second.consumed is True

    async def test_unknown_nonce(self):
        store = InMemoryChallengeStore()
        assert await store.consume("ff" * 32) is None

    async def test_concurrent_consume_has_single_winner(self):
        """Test only one of many concurrent consumers gets it unconsumed."""
        store = InMemoryChallengeStore()
        await store.save(_challenge())

        results = await asyncio.gather(
            *[store.consume("ab" * 32) for _ in range(10)]
        )

        assert sum(1 for c in results if not c.consumed) == 1

    async def test_expired_entries_purged_on_save(self):
        store = InMemoryChallengeStore()
        await store.save(_challenge(nonce="aa" * 32, ttl_seconds=300, age=301))
        await store.save(_challenge(nonce="bb" * 32))

        assert len(store) == 1
        assert await store.consume("aa" * 32) is None


class TestRedisChallengeStore:
    """Unit tests for RedisChallengeStore with a mocked Redis client."""

    async def test_save_sets_json_with_ttl(self):
        """Test the challenge is stored under its nonce with a TTL."""
        redis_client = AsyncMock()
        store = RedisChallengeStore(redis_client)
        challenge = _challenge()

        await store.save(challenge)

        args = redis_client.set.call_args
        assert args.args[0] == KEY_PREFIX + challenge.nonce
        assert json.loads(args.args[1])["wallet_address"] == WALLET
        assert 298 <= args.kwargs["expire_seconds"] <= 300

    async def test_consume_pops_key(self):
        """Test consume reads and deletes in one step."""
        redis_client = AsyncMock()
        challenge = _challenge()
        redis_client.pop.return_value = json.dumps(challenge.to_dict())
        store = RedisChallengeStore(redis_client)

        restored = await store.consume(challenge.nonce)

        redis_client.pop.assert_awaited_once_with(KEY_PREFIX + challenge.nonce)
        assert restored == challenge

    async def test_consume_missing_key(self):
        redis_client = AsyncMock()
        redis_client.pop.return_value = None

        assert await RedisChallengeStore(redis_client).consume("x" * 64) is None
