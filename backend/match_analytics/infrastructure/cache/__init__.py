"""Infrastructure cache module."""

from .cache_service import CacheService
from .redis_client import RedisClient, RedisConfig

__all__ = ["CacheService", "RedisClient", "RedisConfig"]
