"""Realtime event names and the topics they are delivered on."""

from dataclasses import dataclass
from enum import Enum

from refocus_bdk.cache.event_cache import EventKind

NAMESPACE = "refocus.internal.realtime"


class Topic(str, Enum):
    """Topics bot handlers subscribe to."""

    ROOM_SETTINGS = "refocus.room.settings"
    BOT_ACTIONS = "refocus.bot.actions"
    BOT_DATA = "refocus.bot.data"
    EVENTS = "refocus.events"


@dataclass(frozen=True)
class RealtimeEvent:
    """How a transport event name maps onto a topic.

    Attributes:
        name: Event name on the wire
        topic: Topic handlers receive it on
        kind: Dedup key kind
        label: Label used in realtime log lines
        wrapped: Whether the entity sits under ``new`` (update events)
    """

    name: str
    topic: Topic
    kind: EventKind
    label: str
    wrapped: bool = False


INITIALIZE = f"{NAMESPACE}.bot.namespace.initialize"

ROOM_SETTINGS_CHANGED = RealtimeEvent(
    f"{NAMESPACE}.room.settingsChanged",
    Topic.ROOM_SETTINGS,
    EventKind.ROOM_SETTINGS,
    "Room Settings",
)
BOT_ACTION_ADD = RealtimeEvent(
    f"{NAMESPACE}.bot.action.add",
    Topic.BOT_ACTIONS,
    EventKind.BOT_ACTION,
    "Bot Action",
)
BOT_ACTION_UPDATE = RealtimeEvent(
    f"{NAMESPACE}.bot.action.update",
    Topic.BOT_ACTIONS,
    EventKind.BOT_ACTION,
    "Bot Action",
    wrapped=True,
)
BOT_DATA_ADD = RealtimeEvent(
    f"{NAMESPACE}.bot.data.add",
    Topic.BOT_DATA,
    EventKind.BOT_DATA,
    "Bot Data",
)
BOT_DATA_UPDATE = RealtimeEvent(
    f"{NAMESPACE}.bot.data.update",
    Topic.BOT_DATA,
    EventKind.BOT_DATA,
    "Bot Data",
    wrapped=True,
)
BOT_EVENT_ADD = RealtimeEvent(
    f"{NAMESPACE}.bot.event.add",
    Topic.EVENTS,
    EventKind.EVENT,
    "Room Events",
)

EVENTS: dict[str, RealtimeEvent] = {
    event.name: event
    for event in (
        ROOM_SETTINGS_CHANGED,
        BOT_ACTION_ADD,
        BOT_ACTION_UPDATE,
        BOT_DATA_ADD,
        BOT_DATA_UPDATE,
        BOT_EVENT_ADD,
    )
}
