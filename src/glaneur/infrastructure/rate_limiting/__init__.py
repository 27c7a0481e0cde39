"""
Rate limiting infrastructure.
"""

from glaneur.infrastructure.rate_limiting.rate_limiter import (
    CollectRateLimiter,
    InMemoryRateLimitStore,
    RateLimitStore,
    RedisRateLimitStore,
)

__all__ = [
    "CollectRateLimiter",
    "InMemoryRateLimitStore",
    "RateLimitStore",
    "RedisRateLimitStore",
]
