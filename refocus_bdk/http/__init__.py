"""HTTP access to the Refocus REST API."""

from refocus_bdk.http.requester import RefocusRequester
from refocus_bdk.http.retry import RetryState, parse_retry_after

__all__ = ["RefocusRequester", "RetryState", "parse_retry_after"]
