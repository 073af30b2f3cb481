"""Event dedup cache.

Guarantees that a realtime event is handled at most once per bot across
every running instance, as long as the backing store is reachable.
"""

from refocus_bdk.cache.base import TTLStore
from refocus_bdk.cache.event_cache import EventCache, EventKind
from refocus_bdk.cache.inmemory import InMemoryTTLStore
from refocus_bdk.cache.redis import RedisTTLStore

__all__ = [
    "EventCache",
    "EventKind",
    "InMemoryTTLStore",
    "RedisTTLStore",
    "TTLStore",
]
