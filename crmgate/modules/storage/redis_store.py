"""Redis credential store for session sharing across hosts."""

import logging
from typing import Optional

import redis

from .interfaces import REDIS_DRIVER

logger = logging.getLogger(__name__)

LOGIN_COUNTER_KEY = "loggedin"


class RedisCredentialStore:
    """Credential store backed by a Redis server."""

    driver = REDIS_DRIVER

    def __init__(self, redis_client: redis.Redis, login_counter_key: str = LOGIN_COUNTER_KEY):
        """
        Initialize Redis store.

        Args:
            redis_client: Synchronous Redis client
            login_counter_key: Key incremented on every successful login
        """
        self.redis = redis_client
        self.login_counter_key = login_counter_key

    @classmethod
    def from_url(cls, url: str) -> "RedisCredentialStore":
        return cls(redis.Redis.from_url(url))

    def exists(self, key: str) -> bool:
        return self.redis.exists(key) > 0

    def get(self, key: str) -> Optional[bytes]:
        data = self.redis.get(key)
        if data is None:
            return None
        # Clients created with decode_responses=True hand back str
        return data.encode("utf-8") if isinstance(data, str) else data

    def put(self, key: str, value: bytes) -> None:
        self.redis.set(key, value)

    def delete(self, key: str) -> None:
        self.redis.delete(key)

    def record_login(self) -> None:
        count = self.redis.incr(self.login_counter_key)
        logger.debug(f"Login counter {self.login_counter_key} at {count}")
