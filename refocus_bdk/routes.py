"""URL builders for the Refocus REST API.

Every builder takes the versioned API root (``{refocus_url}/v1``).
"""

from typing import Any
from urllib.parse import quote, urlencode

BOTS = "bots"
BOT_ACTIONS = "botActions"
BOT_DATA = "botData"
ROOMS = "rooms"
ROOM_TYPES = "roomTypes"
EVENTS = "events"


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def with_query(url: str, **params: Any) -> str:
    """Append query parameters, skipping those that are None."""
    present = {key: value for key, value in params.items() if value is not None}
    if not present:
        return url
    return f"{url}?{urlencode(present)}"


def bots_route(api_url: str) -> str:
    return f"{api_url}/{BOTS}"


def bot_route(api_url: str, name_or_id: Any) -> str:
    return f"{api_url}/{BOTS}/{_segment(name_or_id)}"


def bot_heartbeat_route(api_url: str, name_or_id: Any) -> str:
    return f"{bot_route(api_url, name_or_id)}/heartbeat"


def rooms_route(api_url: str) -> str:
    return f"{api_url}/{ROOMS}"


def room_route(api_url: str, room_id: Any) -> str:
    return f"{api_url}/{ROOMS}/{_segment(room_id)}"


def room_data_route(api_url: str, room_id: Any) -> str:
    return f"{room_route(api_url, room_id)}/data"


def room_bot_data_route(api_url: str, room_id: Any, bot_id: Any) -> str:
    return f"{room_route(api_url, room_id)}/bots/{_segment(bot_id)}/data"


def bot_data_upsert_route(api_url: str) -> str:
    return f"{api_url}/{ROOMS}/{BOT_DATA}/upsert"


def room_types_route(api_url: str) -> str:
    return f"{api_url}/{ROOM_TYPES}"


def room_type_route(api_url: str, room_type_id: Any) -> str:
    return f"{api_url}/{ROOM_TYPES}/{_segment(room_type_id)}"


def bot_actions_route(api_url: str) -> str:
    return f"{api_url}/{BOT_ACTIONS}"


def bot_action_route(api_url: str, action_id: Any) -> str:
    return f"{api_url}/{BOT_ACTIONS}/{_segment(action_id)}"


def bot_data_route(api_url: str) -> str:
    return f"{api_url}/{BOT_DATA}"


def bot_datum_route(api_url: str, data_id: Any) -> str:
    return f"{api_url}/{BOT_DATA}/{_segment(data_id)}"


def events_route(api_url: str) -> str:
    return f"{api_url}/{EVENTS}"
