import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)


class RedisCache:
    """JSON values in Redis; every failure degrades to a cache miss"""

    def __init__(self, client: redis.Redis, ttl: int = 86400, prefix: str = "pyquer:"):
        self.client = client
        self.ttl = ttl
        self.prefix = prefix

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        try:
            value = self.client.get(self.prefix + key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.warning("Cache get error: %s", e)
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with optional TTL"""
        try:
            self.client.setex(self.prefix + key, ttl or self.ttl, json.dumps(value))
            return True
        except Exception as e:
            logger.warning("Cache set error: %s", e)
            return False

def create_cache(config) -> Optional[RedisCache]:
    """Connect to Redis, or return None when disabled or unreachable"""
    if not config.REDIS_ENABLED:
        return None

    try:
        client = redis.Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2
        )
        client.ping()
        logger.info("Connected to Redis at %s:%s", config.REDIS_HOST, config.REDIS_PORT)
        return RedisCache(client, ttl=config.CACHE_TTL)
    except Exception as e:
        logger.warning("Failed to connect to Redis: %s", e)
        return None
