"""Event cache backend configuration models.

Each backend is a variant of a discriminated union keyed by ``backend``.
A variant knows how to build its own store, so callers never switch on
the backend name.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, SecretStr

from refocus_bdk.cache.base import TTLStore


class BaseCacheConfig(BaseModel):
    """Settings shared by every cache backend."""

    ttl_seconds: int = Field(
        default=60,
        gt=0,
        description="How long a claimed event key blocks re-processing",
    )
    key_prefix: str = Field(
        default="bdk",
        min_length=1,
        description="Prefix for every dedup key",
    )

    async def create_store(self) -> TTLStore | None:
        """Build the backing store, or None when none is available."""
        return None


class DisabledCacheConfig(BaseCacheConfig):
    """No backing store: every event is treated as new."""

    backend: Literal["disabled"] = "disabled"


class MemoryCacheConfig(BaseCacheConfig):
    """Process-local store, only deduplicates within one bot instance."""

    backend: Literal["memory"] = "memory"

    async def create_store(self) -> TTLStore | None:
        from refocus_bdk.cache.inmemory import InMemoryTTLStore

        return InMemoryTTLStore()


class RedisCacheConfig(BaseCacheConfig):
    """Redis-compatible store shared by all bot instances."""

    backend: Literal["redis"] = "redis"
    url: str | None = Field(
        default=None,
        description="Connection URL; overrides host/port/password when set",
    )
    host: str = Field(default="127.0.0.1", description="Redis host")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    password: SecretStr | None = Field(default=None, description="Redis password")
    db: int = Field(default=0, ge=0, description="Redis database index")

    def connection_url(self) -> str:
        """Return the URL used to reach the server."""
        if self.url:
            return self.url
        auth = ""
        if self.password is not None:
            auth = f":{self.password.get_secret_value()}@"
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    async def create_store(self) -> TTLStore | None:
        from refocus_bdk.cache.redis import RedisTTLStore

        return await RedisTTLStore.connect(self.connection_url())


CacheConfig = Annotated[
    DisabledCacheConfig | MemoryCacheConfig | RedisCacheConfig,
    Field(discriminator="backend"),
]
