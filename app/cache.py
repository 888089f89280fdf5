import json
import logging
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)


def create_redis_client() -> Redis:
    return Redis.from_url(settings.redis_url, decode_responses=True)


class RestaurantCache:
    """Redis-backed cache of restaurant timing lookups.

    The cache is best-effort: Redis errors are logged and behave as a miss.
    """

    TIMING_KEY = "restaurant:{restaurant_id}:timing"
    TIME_STATUS_KEY = "restaurant:{restaurant_id}:time_status"

    def __init__(self, client: Redis) -> None:
        self.client = client

    @classmethod
    def timing_key(cls, restaurant_id: str) -> str:
        return cls.TIMING_KEY.format(restaurant_id=restaurant_id)

    @classmethod
    def time_status_key(cls, restaurant_id: str) -> str:
        return cls.TIME_STATUS_KEY.format(restaurant_id=restaurant_id)

    async def get_json(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            logger.warning("Cache read failed key=%s: %s", key, e, extra={"key": key})
            return None
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self.client.set(key, json.dumps(value, default=str), ex=ttl_seconds)
        except RedisError as e:
            logger.warning("Cache write failed key=%s: %s", key, e, extra={"key": key})

    async def invalidate_restaurant(self, restaurant_id: str) -> None:
        keys = [self.timing_key(restaurant_id), self.time_status_key(restaurant_id)]
        try:
            await self.client.delete(*keys)
        except RedisError as e:
            logger.warning(
                "Cache invalidation failed restaurant_id=%s: %s",
                restaurant_id,
                e,
                extra={"restaurant_id": restaurant_id},
            )

    async def close(self) -> None:
        await self.client.aclose()
