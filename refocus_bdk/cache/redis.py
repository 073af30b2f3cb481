"""Redis-backed TTL store."""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from refocus_bdk.cache.base import TTLStore
from refocus_bdk.observability.logging import get_logger

logger = get_logger(__name__)

CLAIM_VALUE = "1"


class RedisTTLStore(TTLStore):
    """TTL store on any Redis-compatible server.

    Claims are ``SET key "1" NX EX ttl``, so two bot instances racing on
    the same key get exactly one winner.
    """

    def __init__(self, redis: Redis):
        """Initialize the store.

        Args:
            redis: Redis client instance
        """
        self._redis = redis

    @classmethod
    async def connect(cls, url: str) -> "RedisTTLStore | None":
        """Connect to a server and verify it answers.

        Args:
            url: Redis connection URL

        Returns:
            A ready store, or None when the server is unreachable
        """
        client: Redis = Redis.from_url(url)
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.warning("redis_unreachable", error=str(e))
            await client.aclose()
            return None
        logger.info("redis_connected")
        return cls(client)

    async def set_if_absent(self, key: str, ttl_seconds: int) -> bool:
        """Claim a key with SET NX EX."""
        success = await self._redis.set(key, CLAIM_VALUE, nx=True, ex=ttl_seconds)
        return bool(success)

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._redis.aclose()
