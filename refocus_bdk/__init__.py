"""Refocus bot development kit.

Async building blocks for bots running against a Refocus server:
a REST client with rate-limit aware retries, realtime dispatch with
cross-instance event deduplication, and bot install/update.
"""

from refocus_bdk.cache import EventCache, EventKind, InMemoryTTLStore, RedisTTLStore
from refocus_bdk.client import RefocusClient
from refocus_bdk.exceptions import (
    BotInstallError,
    BotInstallationError,
    BotUpdateError,
    BotValidationError,
    DuplicateBotError,
    RealtimeFrameError,
    RefocusBDKError,
    RefocusTransportError,
)
from refocus_bdk.http import RefocusRequester
from refocus_bdk.install import BotInstaller, BotManifest, InstallResult
from refocus_bdk.realtime import PollingListener, RealtimeDispatcher

__version__ = "0.1.0"

__all__ = [
    "BotInstallError",
    "BotInstallationError",
    "BotInstaller",
    "BotManifest",
    "BotUpdateError",
    "BotValidationError",
    "DuplicateBotError",
    "EventCache",
    "EventKind",
    "InMemoryTTLStore",
    "InstallResult",
    "PollingListener",
    "RealtimeDispatcher",
    "RealtimeFrameError",
    "RedisTTLStore",
    "RefocusBDKError",
    "RefocusClient",
    "RefocusRequester",
    "RefocusTransportError",
]
