"""Prometheus metrics for the bot development kit.

Counters for REST traffic, rate-limit retries, event deduplication and
bot installs. prometheus_client registers them on import.
"""

from prometheus_client import Counter

# Request metrics
REQUEST_COUNT = Counter(
    "bdk_requests_total",
    "Total number of REST responses received",
    labelnames=["method", "status"],
)

RATE_LIMIT_RETRIES = Counter(
    "bdk_rate_limit_retries_total",
    "Requests re-sent after a 429 response",
    labelnames=["method"],
)

TRANSPORT_ERRORS = Counter(
    "bdk_transport_errors_total",
    "Requests that failed without any response",
    labelnames=["method"],
)

# Event dedup metrics
EVENTS = Counter(
    "bdk_events_total",
    "Realtime events checked against the dedup cache",
    labelnames=["kind", "outcome"],
)

EVENT_CACHE_FAIL_OPEN = Counter(
    "bdk_event_cache_fail_open_total",
    "Dedup checks skipped because the backing store was unavailable",
    labelnames=["reason"],
)

# Install metrics
BOT_INSTALLS = Counter(
    "bdk_bot_installs_total",
    "Bot install/update attempts by path and outcome",
    labelnames=["path", "outcome"],
)
