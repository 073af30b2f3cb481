"""In-memory TTL store for tests and single-instance bots."""

import time
from collections.abc import Callable

from refocus_bdk.cache.base import TTLStore


class InMemoryTTLStore(TTLStore):
    """Process-local TTL store.

    Expired keys are dropped lazily on access. Nothing is shared between
    processes, so this only deduplicates within one bot instance.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the store.

        Args:
            clock: Returns the current time in seconds
        """
        self._clock = clock
        self._expiry: dict[str, float] = {}

    async def set_if_absent(self, key: str, ttl_seconds: int) -> bool:
        now = self._clock()
        expires_at = self._expiry.get(key)
        if expires_at is not None and expires_at > now:
            return False
        self._expiry[key] = now + ttl_seconds
        return True

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for expires_at in self._expiry.values() if expires_at > now)

    def clear(self) -> None:
        """Clear all keys (for testing)."""
        self._expiry.clear()
