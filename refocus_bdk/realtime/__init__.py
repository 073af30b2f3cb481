"""Realtime event dispatch with per-bot deduplication."""

from refocus_bdk.realtime.dispatcher import RealtimeDispatcher
from refocus_bdk.realtime.events import RealtimeEvent, Topic
from refocus_bdk.realtime.polling import PollingListener

__all__ = ["PollingListener", "RealtimeDispatcher", "RealtimeEvent", "Topic"]
