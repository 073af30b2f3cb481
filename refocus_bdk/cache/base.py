"""Backing store interface for the event dedup cache."""

from abc import ABC, abstractmethod


class TTLStore(ABC):
    """Key store with automatic expiry and an atomic conditional set."""

    @abstractmethod
    async def set_if_absent(self, key: str, ttl_seconds: int) -> bool:
        """Claim a key if nobody holds it.

        Check and set happen as one atomic operation on the store.

        Args:
            key: Key to claim
            ttl_seconds: Expiry of the claim

        Returns:
            True if this call created the key, False if it already existed
        """
        pass

    async def close(self) -> None:
        """Release connections held by the store."""
        return None
