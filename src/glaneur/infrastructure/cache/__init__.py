"""
Cache infrastructure package.
"""

from glaneur.infrastructure.cache.redis_cache_client import RedisCacheClient

__all__ = ["RedisCacheClient"]
