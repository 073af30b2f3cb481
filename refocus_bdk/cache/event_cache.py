"""At-most-once gate for realtime events.

Every bot instance subscribed to the same room receives the same realtime
events. Before handling one, an instance claims a key derived from the
event in a shared TTL store; only the instance whose claim succeeds goes
on to handle it.
"""

from enum import Enum

from refocus_bdk.cache.base import TTLStore
from refocus_bdk.observability.logging import get_logger
from refocus_bdk.observability.metrics import EVENT_CACHE_FAIL_OPEN, EVENTS

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 60
DEFAULT_KEY_PREFIX = "bdk"


class EventKind(str, Enum):
    """Kind tag of a realtime event, first component of its dedup key."""

    BOT_ACTION = "botAction"
    BOT_DATA = "botData"
    EVENT = "event"
    ROOM_SETTINGS = "roomSettings"


class EventCache:
    """Decides whether an event was already consumed by this bot.

    Key format: {prefix}:{kind}:{event_id}:{updated_at}:{consumer_id}

    An event edited after it was handled carries a new ``updatedAt`` and
    is therefore treated as a new event.
    """

    def __init__(
        self,
        store: TTLStore | None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        """Initialize the cache.

        Args:
            store: Backing store, or None to let every event through
            ttl_seconds: How long a claim blocks duplicates
            key_prefix: Prefix for every key
        """
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    @property
    def store(self) -> TTLStore | None:
        return self._store

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def make_key(
        self,
        event_id: str,
        updated_at: str,
        consumer_id: str,
        event_kind: EventKind,
    ) -> str:
        """Build the dedup key for an event."""
        return (
            f"{self._key_prefix}:{event_kind.value}:{event_id}:"
            f"{updated_at}:{consumer_id}"
        )

    async def has_been_consumed(
        self,
        event_id: str,
        updated_at: str,
        consumer_id: str,
        event_kind: EventKind,
    ) -> bool:
        """Claim an event for this consumer.

        Never raises. Without a reachable store every event counts as new,
        so duplicates are possible but no event is lost.

        Args:
            event_id: Server-assigned id of the event
            updated_at: Last-modified timestamp of the event
            consumer_id: Identity of the consuming bot
            event_kind: Kind of event

        Returns:
            True if the event was already claimed and must be skipped,
            False if the caller should process it
        """
        if self._store is None:
            EVENT_CACHE_FAIL_OPEN.labels(reason="no_store").inc()
            logger.warning(
                "event_cache_fail_open",
                reason="no_store",
                event_id=event_id,
                kind=event_kind.value,
            )
            return False

        key = self.make_key(event_id, updated_at, consumer_id, event_kind)
        try:
            claimed = await self._store.set_if_absent(key, self._ttl_seconds)
        except Exception as e:
            EVENT_CACHE_FAIL_OPEN.labels(reason="store_error").inc()
            logger.warning(
                "event_cache_fail_open",
                reason="store_error",
                key=key,
                error=str(e),
            )
            return False

        if claimed:
            EVENTS.labels(kind=event_kind.value, outcome="new").inc()
            logger.debug("event_claimed", key=key, ttl=self._ttl_seconds)
            return False

        EVENTS.labels(kind=event_kind.value, outcome="duplicate").inc()
        logger.debug("event_already_consumed", key=key)
        return True
