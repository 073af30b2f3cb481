"""Build an EventCache from configuration."""

from typing import TYPE_CHECKING

from refocus_bdk.cache.event_cache import EventCache
from refocus_bdk.observability.logging import get_logger

if TYPE_CHECKING:
    from refocus_bdk.config.models.cache import BaseCacheConfig

logger = get_logger(__name__)


async def build_event_cache(config: "BaseCacheConfig") -> EventCache:
    """Create the event cache for the configured backend.

    A backend that cannot be reached yields a cache without a store,
    which lets every event through.

    Args:
        config: Cache configuration variant

    Returns:
        Configured EventCache
    """
    store = await config.create_store()
    if store is None:
        logger.warning(
            "event_cache_without_store",
            backend=getattr(config, "backend", "disabled"),
        )
    else:
        logger.info(
            "event_cache_ready",
            backend=getattr(config, "backend", None),
            ttl=config.ttl_seconds,
        )
    return EventCache(store, ttl_seconds=config.ttl_seconds, key_prefix=config.key_prefix)
