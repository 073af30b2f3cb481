"""Refocus REST client for bots.

Usage:
    from refocus_bdk.client import RefocusClient
    from refocus_bdk.config import get_settings

    async with RefocusClient.from_settings(get_settings()) as client:
        room = await client.get_room_by_id(2)
        await client.create_events(2, "Bot joined the room")
"""

import asyncio
import json
from typing import TYPE_CHECKING, Any

import httpx

from refocus_bdk.http.requester import RefocusRequester
from refocus_bdk.observability.logging import get_logger
from refocus_bdk.routes import (
    bot_action_route,
    bot_actions_route,
    bot_data_route,
    bot_data_upsert_route,
    bot_datum_route,
    bot_route,
    bots_route,
    events_route,
    room_bot_data_route,
    room_data_route,
    room_route,
    room_type_route,
    room_types_route,
    with_query,
)

if TYPE_CHECKING:
    from refocus_bdk.config.settings import Settings

logger = get_logger(__name__)

DEFAULT_EVENTS_LIMIT = 100


def _json_body(response: httpx.Response) -> Any:
    """Decoded body of a successful response, or None."""
    if not response.is_success:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _room_id(room: Any) -> Any:
    """Room ids travel as integers in request bodies."""
    try:
        return int(room)
    except (TypeError, ValueError):
        return room


def is_bot_installed_in_room(event: dict[str, Any], bot_name: str) -> bool:
    """Check whether a room event's room type lists the bot.

    Args:
        event: Room event carrying ``Room.RoomType.Bots``
        bot_name: Name of the bot

    Returns:
        True if the bot is among the room type's bots
    """
    room = event.get("Room") or {}
    room_type = room.get("RoomType") or {}
    bots = room_type.get("Bots") or []
    return any(isinstance(bot, dict) and bot.get("name") == bot_name for bot in bots)


class RefocusClient:
    """Async client for the rooms, bots, bot actions, bot data and events API.

    Raw operations return the httpx.Response whatever its status; the
    ``get_*`` helpers parse bodies and return None on failures.

    Attributes:
        api_url: Versioned API root
    """

    def __init__(self, requester: RefocusRequester, refocus_url: str):
        """Initialize the client.

        Args:
            requester: Request primitive shared by all calls
            refocus_url: Base URL of the Refocus server
        """
        self._requester = requester
        self.api_url = f"{refocus_url.rstrip('/')}/v1"

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RefocusClient":
        """Create a client and its requester from kit settings."""
        return cls(
            RefocusRequester.from_settings(settings, transport=transport),
            settings.refocus_url,
        )

    @property
    def requester(self) -> RefocusRequester:
        return self._requester

    async def close(self) -> None:
        """Close the underlying HTTP clients."""
        await self._requester.aclose()

    async def __aenter__(self) -> "RefocusClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # Rooms

    async def find_room(self, room_id: Any) -> httpx.Response:
        return await self._requester.get(room_route(self.api_url, room_id))

    async def update_settings(self, room_id: Any, settings: dict[str, Any]) -> httpx.Response:
        """Replace a room's settings."""
        return await self._requester.patch(
            room_route(self.api_url, room_id), {"settings": settings}
        )

    async def get_room_types(self) -> httpx.Response:
        return await self._requester.get(room_types_route(self.api_url))

    async def get_room_by_id(self, room_id: Any) -> dict[str, Any] | None:
        """Fetch a room.

        Returns:
            The room, or None if the id is empty or the request failed
        """
        if room_id is None or room_id == "":
            return None
        body = _json_body(await self.find_room(room_id))
        if not isinstance(body, dict):
            logger.warning("room_not_found", room_id=room_id)
            return None
        return body

    async def get_room_type_by_id(self, room_type_id: Any) -> dict[str, Any] | None:
        """Fetch a room type, or None if it cannot be read."""
        if room_type_id is None or room_type_id == "":
            return None
        response = await self._requester.get(room_type_route(self.api_url, room_type_id))
        body = _json_body(response)
        return body if isinstance(body, dict) else None

    # Bots

    async def find_bot(self, bot_id: Any) -> httpx.Response:
        return await self._requester.get(bot_route(self.api_url, bot_id))

    async def get_bot_id(self, bot_name: str) -> str | None:
        """Resolve a bot name to its id."""
        if not bot_name:
            return None
        response = await self._requester.get(
            with_query(bots_route(self.api_url), name=bot_name)
        )
        body = _json_body(response)
        if isinstance(body, list) and body and isinstance(body[0], dict):
            return body[0].get("id")
        return None

    # Bot actions

    async def find_bot_action(self, action_id: Any) -> httpx.Response:
        return await self._requester.get(bot_action_route(self.api_url, action_id))

    async def get_bot_actions(
        self,
        room: Any,
        bot: Any = None,
        name: str | None = None,
    ) -> httpx.Response:
        """List a room's bot actions, optionally for one bot and action name."""
        if not bot:
            name = None
        url = with_query(bot_actions_route(self.api_url), roomId=room, botId=bot or None, name=name)
        return await self._requester.get(url)

    async def create_bot_action(self, action: dict[str, Any]) -> httpx.Response:
        return await self._requester.post(bot_actions_route(self.api_url), action)

    async def respond_bot_action(
        self,
        action_id: Any,
        response: Any,
        event_log: dict[str, Any] | None = None,
        parameters_override: list[Any] | None = None,
    ) -> httpx.Response:
        """Answer a bot action and log an event describing it.

        Args:
            action_id: Bot action to answer
            response: Response object stored on the action
            event_log: Replaces the default event ``log``/``context``
            parameters_override: Replaces the action's parameters

        Returns:
            Response of the event creation, or of the PATCH if it failed
        """
        patch: dict[str, Any] = {"isPending": False, "response": response}
        if parameters_override:
            patch["parameters"] = parameters_override

        patched = await self._requester.patch(bot_action_route(self.api_url, action_id), patch)
        action = _json_body(patched)
        if not isinstance(action, dict):
            logger.warning(
                "bot_action_response_failed",
                action_id=action_id,
                status_code=patched.status_code,
            )
            return patched

        if event_log:
            event = dict(event_log)
        else:
            event = {
                "log": f"{action.get('botId')} succesfully performed {action.get('name')}",
                "context": {"type": "Event"},
            }
        context = dict(event.get("context") or {})
        context["name"] = action.get("name")
        context["response"] = action.get("response")
        event["context"] = context
        event["roomId"] = action.get("roomId")
        event["botId"] = action.get("botId")
        event["botActionId"] = action.get("id")
        event["userId"] = action.get("userId")
        return await self._requester.post(events_route(self.api_url), event)

    async def respond_bot_action_no_log(self, action_id: Any, response: Any) -> httpx.Response:
        """Answer a bot action without creating an event."""
        return await self._requester.patch(
            bot_action_route(self.api_url, action_id),
            {"isPending": False, "response": response},
        )

    # Bot data

    async def find_bot_data(self, data_id: Any) -> httpx.Response:
        return await self._requester.get(bot_datum_route(self.api_url, data_id))

    async def get_bot_data(
        self,
        room: Any,
        bot: Any = None,
        name: str | None = None,
    ) -> httpx.Response:
        """Read bot data of a room, of one bot in it, or one named value."""
        if not bot:
            url = room_data_route(self.api_url, room)
        elif not name:
            url = room_bot_data_route(self.api_url, room, bot)
        else:
            url = with_query(bot_data_route(self.api_url), roomId=room, botId=bot, name=name)
        return await self._requester.get(url)

    async def create_bot_data(self, room: Any, bot: Any, name: str, value: Any) -> httpx.Response:
        body = {"name": name, "roomId": _room_id(room), "botId": bot, "value": value}
        return await self._requester.post(bot_data_route(self.api_url), body)

    async def change_bot_data(self, data_id: Any, value: Any) -> httpx.Response:
        return await self._requester.patch(bot_datum_route(self.api_url, data_id), {"value": value})

    async def upsert_bot_data(self, room: Any, bot: Any, name: str, value: Any) -> httpx.Response:
        """Create the named bot data or overwrite its value."""
        body = {"name": name, "roomId": _room_id(room), "botId": bot, "value": value}
        return await self._requester.post(bot_data_upsert_route(self.api_url), body)

    async def get_and_parse_bot_data(self, room: Any, bot_name: str, name: str) -> Any | None:
        """Read one bot data value and decode its JSON.

        Returns:
            The decoded value, or None if it is missing or not valid JSON
        """
        if not room or not bot_name or not name:
            return None
        bot_id = await self.get_bot_id(bot_name)
        if bot_id is None:
            return None
        body = _json_body(await self.get_bot_data(room, bot_id, name))
        if not isinstance(body, list) or not body:
            return None
        value = body[0].get("value")
        if value is None:
            return None
        try:
            return json.loads(value)
        except (TypeError, ValueError):
            logger.warning("bot_data_not_json", room=room, name=name)
            return None

    async def get_or_initialize_bot_data(
        self,
        room: Any,
        bot_name: str,
        name: str,
        default: Any,
    ) -> Any:
        """Read a bot data value, creating it with a default if missing.

        Returns:
            The stored value as saved on the server, or ``default`` when it
            had to be created
        """
        bot_id = await self.get_bot_id(bot_name)
        if bot_id is not None:
            body = _json_body(await self.get_bot_data(room, bot_id, name))
            if isinstance(body, list) and body:
                return body[0].get("value")

        await self.create_bot_data(room, bot_id, name, json.dumps(default))
        logger.info("bot_data_initialized", room=room, name=name)
        return default

    # Events

    async def get_events(
        self,
        room: Any,
        limit: int = DEFAULT_EVENTS_LIMIT,
        offset: int = 0,
    ) -> httpx.Response:
        logger.debug("get_events", room=room, limit=limit, offset=offset)
        url = with_query(events_route(self.api_url), roomId=room, limit=limit, offset=offset)
        return await self._requester.get(url)

    async def get_all_events(self, room: Any) -> list[dict[str, Any]]:
        """Fetch every event of a room, paging by the server's total count."""
        logger.debug("get_all_events", room=room)
        first = await self._requester.get(with_query(events_route(self.api_url), roomId=room))
        events = _json_body(first)
        if not isinstance(events, list):
            return []

        try:
            total = int(first.headers.get("x-total-count", len(events)))
        except ValueError:
            total = len(events)
        if total <= len(events) or not events:
            return events

        limit = len(events)
        pages = await asyncio.gather(
            *(self.get_events(room, limit=limit, offset=offset) for offset in range(0, total, limit))
        )
        output: list[dict[str, Any]] = []
        for page in pages:
            body = _json_body(page)
            if isinstance(body, list):
                output.extend(body)
        return output

    async def create_events(
        self,
        room: Any,
        msg: str,
        context: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Post a log event to a room."""
        event: dict[str, Any] = {"log": msg, "roomId": room}
        if context:
            event["context"] = context
        return await self._requester.post(events_route(self.api_url), event)

    async def get_active_users(self, room: Any) -> dict[str, dict[str, Any]]:
        """Users currently active in a room, from their latest User event.

        Returns:
            Mapping of user id to user, with ``isActive`` set
        """
        events = _json_body(
            await self._requester.get(with_query(events_route(self.api_url), roomId=room))
        )
        if not isinstance(events, list):
            return {}

        latest_first = sorted(events, key=lambda event: event.get("createdAt") or "", reverse=True)
        seen: set[Any] = set()
        output: dict[str, dict[str, Any]] = {}
        for event in latest_first:
            context = event.get("context") or {}
            if context.get("type") != "User":
                continue
            user = context.get("user") or {}
            user_id = user.get("id")
            if user_id in seen:
                continue
            seen.add(user_id)
            if context.get("isActive"):
                output[user_id] = {**user, "isActive": context["isActive"]}
        return output

    is_bot_installed_in_room = staticmethod(is_bot_installed_in_room)
