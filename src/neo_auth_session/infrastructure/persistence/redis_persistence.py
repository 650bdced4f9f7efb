"""Redis session persistence."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ...core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class RedisPersistence:
    """Session record stored under one Redis key.

    Useful when the "client device" is a shared kiosk process or a thin
    client whose local disk is not trusted.
    """

    def __init__(
        self,
        redis_client,
        storage_key: str = "neo_auth_session_user",
        key_prefix: str = "auth_session",
        ttl_seconds: Optional[int] = None,
    ):
        """Initialize Redis persistence.

        Args:
            redis_client: ``redis.asyncio`` client instance
            storage_key: Fixed namespace key
            key_prefix: Prefix for the Redis key
            ttl_seconds: Optional expiry applied on every write
        """
        if not redis_client:
            raise ValueError("Redis client is required")
        if not storage_key:
            raise ValueError("Storage key is required")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("TTL must be positive")

        self.redis = redis_client
        self.storage_key = storage_key
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisPersistence":
        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    @property
    def key(self) -> str:
        return f"{self.key_prefix}:{self.storage_key}"

    async def get(self) -> Optional[str]:
        try:
            value = await self.redis.get(self.key)
        except RedisError as e:
            raise self._error("get", e) from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, record: str) -> None:
        try:
            if self.ttl_seconds:
                await self.redis.set(self.key, record, ex=self.ttl_seconds)
            else:
                await self.redis.set(self.key, record)
        except RedisError as e:
            raise self._error("set", e) from e

    async def clear(self) -> None:
        try:
            await self.redis.delete(self.key)
        except RedisError as e:
            raise self._error("clear", e) from e

    async def close(self) -> None:
        await self.redis.aclose()

    def _error(self, operation: str, error: Exception) -> PersistenceError:
        logger.error(f"Redis session {operation} failed for {self.key}: {error}")
        return PersistenceError(
            f"Redis session {operation} failed",
            details={"key": self.key, "error": str(error)},
        )
