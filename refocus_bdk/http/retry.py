"""Retry bookkeeping for rate-limited requests."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_RETRY_DELAY_MS = 5000


@dataclass(frozen=True)
class RetryState:
    """Position in the retry loop of one logical request.

    Attributes:
        attempt: Zero-based index of the send in progress
        max_attempts: Total sends allowed, the first one included
        last_delay: Seconds waited before the current send
    """

    attempt: int = 0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    last_delay: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0 <= self.attempt < self.max_attempts:
            raise ValueError(
                f"attempt {self.attempt} outside 0..{self.max_attempts - 1}"
            )

    @property
    def can_retry(self) -> bool:
        """Whether another send is allowed after this one."""
        return self.attempt + 1 < self.max_attempts

    def next(self, delay: float) -> "RetryState":
        """Return the state for the following send."""
        return RetryState(
            attempt=self.attempt + 1,
            max_attempts=self.max_attempts,
            last_delay=delay,
        )


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """Parse a Retry-After header into seconds to wait.

    Accepts both forms allowed by HTTP: delta-seconds ("120") and an
    HTTP date ("Wed, 21 Oct 2026 07:28:00 GMT"). Dates in the past
    yield 0.

    Args:
        value: Raw header value
        now: Reference time for HTTP dates, defaults to the current time

    Returns:
        Delay in seconds, or None when the header is missing or invalid
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        reference = now or datetime.now(UTC)
        return max(0.0, (when - reference).total_seconds())

    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds
