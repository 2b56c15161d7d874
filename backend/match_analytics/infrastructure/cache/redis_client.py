"""
Redis Client Module

Provides a wrapper for Redis operations with JSON serialization support.
Used as the optional shared layer behind the in-memory prediction cache.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
import redis

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig:
    """Connection settings for the shared cache layer."""
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: int = 5


class RedisClient:
    """Wrapper for Redis operations with JSON support."""

    def __init__(self, config: Optional[RedisConfig] = None, connection: Optional[redis.Redis] = None):
        self.config = config or RedisConfig()

        if connection is not None:
            self._redis = connection
            return

        try:
            self._redis = redis.Redis(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                decode_responses=True,
                socket_timeout=self.config.socket_timeout,
                retry_on_timeout=True,
            )
            # Test connection
            self._redis.ping()
            logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._redis = None

    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        if self._redis is None:
            return False
        try:
            return bool(self._redis.ping())
        except Exception:
            return False

    def get(self, key: str) -> Optional[Any]:
        """Get value from Redis and deserialize JSON."""
        if self._redis is None:
            return None

        try:
            value = self._redis.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Error getting key {key} from Redis: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Serialize value to JSON and set in Redis with optional TTL."""
        if self._redis is None:
            return False

        try:
            serialized_value = json.dumps(value, default=str)
            return bool(self._redis.set(key, serialized_value, ex=ttl_seconds))
        except Exception as e:
            logger.error(f"Error setting key {key} in Redis: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete key from Redis."""
        if self._redis is None:
            return False
        try:
            return bool(self._redis.delete(key))
        except Exception as e:
            logger.error(f"Error deleting key {key} from Redis: {e}")
            return False
