"""Redis cache client implementation."""

from typing import Any, List, Optional

import redis.asyncio as aioredis


class RedisCacheClient:
    """
    Redis client wrapper using the async redis library.

    Shared by the challenge store and the collect rate limiter. Connects
    lazily on first use.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
    ):
        """
        Initialize Redis client configuration.

        Args:
            host: Redis server host
            port: Redis server port
            db: Redis database number (0-15)
            password: Redis password (None if no auth)
        """
        self.host = host
        self.port = port
        self.db = db
        self.password = password if password else None
        self._client: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        """Establish connection to Redis server."""
        if self._client is not None:
            return

        self._client = aioredis.from_url(
            f"redis://{self.host}:{self.port}/{self.db}",
            password=self.password,
            encoding="utf-8",
            decode_responses=True,
        )

    async def disconnect(self) -> None:
        """Close connection to Redis server."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def client(self) -> aioredis.Redis:
        """Get the connected client."""
        if self._client is None:
            await self.connect()
        return self._client

    async def set(
        self,
        key: str,
        value: str,
        expire_seconds: Optional[int] = None,
    ) -> bool:
        """
        Store value with optional expiration.

        Args:
            key: Cache key
            value: Value to store
            expire_seconds: TTL in seconds (None = no expiration)

        Returns:
            True if stored successfully
        """
        client = await self.client()
        if expire_seconds:
            await client.setex(key, expire_seconds, value)
        else:
            await client.set(key, value)
        return True

    async def get(self, key: str) -> Optional[str]:
        """Retrieve value by key."""
        client = await self.client()
        return await client.get(key)

    async def pop(self, key: str) -> Optional[str]:
        """
        Atomically read and delete a key.

        Uses a MULTI/EXEC pipeline so exactly one caller sees the value.

        Returns:
            Value if it existed, None otherwise
        """
        client = await self.client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.get(key)
            pipe.delete(key)
            value, _ = await pipe.execute()
        return value

    async def run_script(self, script: str, keys: List[str], args: List[Any]) -> Any:
        """
        Run a Lua script atomically.

        Args:
            script: Lua source (cached server-side by SHA)
            keys: KEYS passed to the script
            args: ARGV passed to the script

        Returns:
            Script return value
        """
        client = await self.client()
        return await client.register_script(script)(keys=keys, args=args)

    async def ping(self) -> bool:
        """
        Check if Redis server is reachable.

        Returns:
            True if server responds
        """
        try:
            client = await self.client()
            await client.ping()
            return True
        except aioredis.RedisError:
            return False
