"""Dispatch realtime frames to bot handlers, at most once per bot.

Transports (socket client, polling) hand raw frames to
``RealtimeDispatcher.handle_frame``. The dispatcher decodes the entity,
claims it in the event cache and only then awaits the handlers
registered for its topic.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from refocus_bdk.cache.event_cache import EventCache
from refocus_bdk.exceptions import RealtimeFrameError
from refocus_bdk.observability.logging import get_logger, log_realtime
from refocus_bdk.realtime.events import EVENTS, INITIALIZE, RealtimeEvent, Topic

logger = get_logger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable[None]]


def extract_entity(event: RealtimeEvent, raw: str | bytes | dict[str, Any]) -> dict[str, Any]:
    """Pull the entity out of a frame.

    Frames are JSON objects keyed by the event name; update events carry
    the new state under ``new``.

    Raises:
        RealtimeFrameError: If the frame is not JSON or has no entity
    """
    if isinstance(raw, dict):
        frame = raw
    else:
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise RealtimeFrameError(
                f"Frame for {event.name} is not JSON", event_name=event.name
            ) from e

    payload = frame.get(event.name) if isinstance(frame, dict) else None
    if event.wrapped and isinstance(payload, dict):
        payload = payload.get("new")
    if not isinstance(payload, dict):
        raise RealtimeFrameError(
            f"Frame for {event.name} carries no entity",
            event_name=event.name,
            details=frame,
        )
    return payload


class RealtimeDispatcher:
    """Routes realtime entities to topic handlers.

    Attributes:
        consumer_id: Identity of this bot in dedup keys
    """

    def __init__(self, cache: EventCache, consumer_id: str):
        """Initialize the dispatcher.

        Args:
            cache: Event dedup cache
            consumer_id: Bot identity, usually the bot name
        """
        self._cache = cache
        self.consumer_id = consumer_id
        self._handlers: dict[Topic, list[Handler]] = {topic: [] for topic in Topic}

    def on(self, topic: Topic | str, handler: Handler) -> None:
        """Register an async handler for a topic."""
        self._handlers[Topic(topic)].append(handler)

    async def dispatch(self, event: RealtimeEvent, entity: dict[str, Any]) -> bool:
        """Hand an entity to its topic handlers unless already consumed.

        Entities without an id or update time cannot be keyed and are
        always delivered.

        Returns:
            True if handlers ran
        """
        log_realtime(logger, event.label, entity)

        event_id = entity.get("id")
        updated_at = entity.get("updatedAt")
        if event_id is not None and updated_at is not None:
            consumed = await self._cache.has_been_consumed(
                str(event_id), str(updated_at), self.consumer_id, event.kind
            )
            if consumed:
                logger.debug(
                    "realtime_duplicate_skipped",
                    event_name=event.name,
                    event_id=event_id,
                )
                return False
        else:
            logger.debug("realtime_unkeyed_entity", event_name=event.name)

        for handler in self._handlers[event.topic]:
            await handler(entity)
        return True

    async def handle_frame(self, event_name: str, raw: str | bytes | dict[str, Any] | None = None) -> bool:
        """Decode and dispatch one transport frame.

        Malformed frames are logged and dropped.

        Args:
            event_name: Event name the transport received
            raw: Frame payload

        Returns:
            True if handlers ran
        """
        if event_name == INITIALIZE:
            logger.info("realtime_initialized")
            return False

        event = EVENTS.get(event_name)
        if event is None:
            logger.debug("realtime_unknown_event", event_name=event_name)
            return False

        try:
            entity = extract_entity(event, raw if raw is not None else "")
        except RealtimeFrameError as e:
            logger.warning("realtime_frame_dropped", event_name=event_name, error=e.message)
            return False

        return await self.dispatch(event, entity)
