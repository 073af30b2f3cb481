"""Tests for Prometheus metrics."""

from prometheus_client import REGISTRY

from refocus_bdk.observability.metrics import (
    BOT_INSTALLS,
    EVENT_CACHE_FAIL_OPEN,
    EVENTS,
    RATE_LIMIT_RETRIES,
    REQUEST_COUNT,
    TRANSPORT_ERRORS,
)


def sample(name: str, **labels: str) -> float:
    """Current value of a counter sample, 0 when never incremented."""
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestCounters:
    """Tests for counter definitions."""

    def test_request_count_increment(self) -> None:
        """REQUEST_COUNT is labelled by method and status."""
        before = sample("bdk_requests_total", method="GET", status="418")
        REQUEST_COUNT.labels(method="GET", status="418").inc()
        assert sample("bdk_requests_total", method="GET", status="418") == before + 1

    def test_rate_limit_retries_increment(self) -> None:
        """RATE_LIMIT_RETRIES is labelled by method."""
        before = sample("bdk_rate_limit_retries_total", method="PUT")
        RATE_LIMIT_RETRIES.labels(method="PUT").inc()
        assert sample("bdk_rate_limit_retries_total", method="PUT") == before + 1

    def test_other_counters_accept_labels(self) -> None:
        """Remaining counters accept their labels."""
        TRANSPORT_ERRORS.labels(method="GET").inc()
        EVENTS.labels(kind="botAction", outcome="new").inc()
        EVENT_CACHE_FAIL_OPEN.labels(reason="store_error").inc()
        BOT_INSTALLS.labels(path="installed", outcome="success").inc()

        assert sample("bdk_event_cache_fail_open_total", reason="store_error") >= 1
