"""Tests for RefocusClient."""

import json

import httpx
import pytest

from refocus_bdk.client import RefocusClient, is_bot_installed_in_room
from refocus_bdk.config.settings import Settings
from refocus_bdk.http.requester import RefocusRequester

BASE_URL = "http://refocus.test"


def make_client(transport: httpx.AsyncBaseTransport) -> RefocusClient:
    return RefocusClient(RefocusRequester(token="t", transport=transport), BASE_URL)


class TestRooms:
    """Tests for room operations."""

    async def test_find_room(self, recording_transport) -> None:
        """find_room returns the raw response."""
        transport = recording_transport(httpx.Response(200, json={"id": 2}))
        async with make_client(transport) as client:
            response = await client.find_room(2)

        assert response.json() == {"id": 2}
        assert str(transport.requests[0].url) == f"{BASE_URL}/v1/rooms/2"

    async def test_update_settings(self, recording_transport) -> None:
        """Settings are PATCHed under a settings key."""
        transport = recording_transport(httpx.Response(200))
        async with make_client(transport) as client:
            await client.update_settings(2, {"sharedContext": {}})

        request = transport.requests[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == {"settings": {"sharedContext": {}}}

    async def test_get_room_by_id(self, recording_transport) -> None:
        """A found room is returned as a dict."""
        transport = recording_transport(httpx.Response(200, json={"id": 2, "name": "testRoom"}))
        async with make_client(transport) as client:
            room = await client.get_room_by_id(2)

        assert room == {"id": 2, "name": "testRoom"}

    async def test_get_room_by_id_without_id(self, recording_transport) -> None:
        """No id means no request and None."""
        transport = recording_transport()
        async with make_client(transport) as client:
            assert await client.get_room_by_id(None) is None

        assert transport.requests == []

    async def test_get_room_by_id_failure(self, recording_transport) -> None:
        """A failed request gives None."""
        transport = recording_transport(httpx.Response(404, json={"errors": []}))
        async with make_client(transport) as client:
            assert await client.get_room_by_id("3") is None

    async def test_get_room_type_by_id(self, recording_transport) -> None:
        """Room types are read from the roomTypes route."""
        transport = recording_transport(httpx.Response(200, json={"id": "rt", "name": "type"}))
        async with make_client(transport) as client:
            room_type = await client.get_room_type_by_id("rt")

        assert room_type == {"id": "rt", "name": "type"}
        assert str(transport.requests[0].url) == f"{BASE_URL}/v1/roomTypes/rt"


class TestBots:
    """Tests for bot lookups."""

    async def test_get_bot_id(self, recording_transport) -> None:
        """The first matching bot's id is returned."""
        transport = recording_transport(httpx.Response(200, json=[{"id": 1234}]))
        async with make_client(transport) as client:
            assert await client.get_bot_id("Dummy-Bot") == 1234

        assert transport.requests[0].url.params["name"] == "Dummy-Bot"

    async def test_get_bot_id_empty_name(self, recording_transport) -> None:
        """An empty name resolves to None without a request."""
        async with make_client(recording_transport()) as client:
            assert await client.get_bot_id("") is None

    async def test_get_bot_id_unknown(self, recording_transport) -> None:
        """An unknown bot resolves to None."""
        transport = recording_transport(httpx.Response(200, json=[]))
        async with make_client(transport) as client:
            assert await client.get_bot_id("nobody") is None


class TestBotActions:
    """Tests for bot action operations."""

    @pytest.mark.parametrize(
        ("bot", "name", "expected"),
        [
            (None, None, {"roomId": "2"}),
            ("b1", None, {"roomId": "2", "botId": "b1"}),
            ("b1", "createDoc", {"roomId": "2", "botId": "b1", "name": "createDoc"}),
        ],
    )
    async def test_get_bot_actions_query(
        self, recording_transport, bot: str | None, name: str | None, expected: dict
    ) -> None:
        """Filters are added to the query as given."""
        transport = recording_transport(httpx.Response(200, json=[]))
        async with make_client(transport) as client:
            await client.get_bot_actions(2, bot, name)

        url = transport.requests[0].url
        assert url.path == "/v1/botActions"
        assert dict(url.params) == expected

    async def test_respond_bot_action_logs_event(self, recording_transport) -> None:
        """Responding patches the action then posts an event."""
        action = {
            "id": "a1",
            "name": "createDoc",
            "botId": "b1",
            "roomId": 2,
            "userId": "u1",
            "response": {"url": "http://doc"},
        }
        transport = recording_transport(httpx.Response(200, json=action), httpx.Response(201))
        async with make_client(transport) as client:
            await client.respond_bot_action("a1", {"url": "http://doc"})

        patch, post = transport.requests
        assert json.loads(patch.content) == {"isPending": False, "response": {"url": "http://doc"}}
        event = json.loads(post.content)
        assert post.url.path == "/v1/events"
        assert event["log"] == "b1 succesfully performed createDoc"
        assert event["context"] == {
            "type": "Event",
            "name": "createDoc",
            "response": {"url": "http://doc"},
        }
        assert event["botActionId"] == "a1"
        assert event["roomId"] == 2

    async def test_respond_bot_action_custom_log(self, recording_transport) -> None:
        """A custom event log and parameter override are honoured."""
        action = {"id": "a1", "name": "n", "botId": "b1", "roomId": 2, "response": "ok"}
        transport = recording_transport(httpx.Response(200, json=action), httpx.Response(201))
        async with make_client(transport) as client:
            await client.respond_bot_action(
                "a1",
                "ok",
                event_log={"log": "A long message", "context": {"type": "Debug"}},
                parameters_override=[{"name": "p", "value": 1}],
            )

        patch, post = transport.requests
        assert json.loads(patch.content)["parameters"] == [{"name": "p", "value": 1}]
        event = json.loads(post.content)
        assert event["log"] == "A long message"
        assert event["context"]["type"] == "Debug"

    async def test_respond_bot_action_patch_failure(self, recording_transport) -> None:
        """No event is logged when the PATCH fails."""
        transport = recording_transport(httpx.Response(404))
        async with make_client(transport) as client:
            response = await client.respond_bot_action("a1", "ok")

        assert response.status_code == 404
        assert len(transport.requests) == 1

    async def test_respond_no_log(self, recording_transport) -> None:
        """respond_bot_action_no_log only patches."""
        transport = recording_transport(httpx.Response(200, json={}))
        async with make_client(transport) as client:
            await client.respond_bot_action_no_log("a1", "ok")

        assert len(transport.requests) == 1


class TestBotData:
    """Tests for bot data operations."""

    @pytest.mark.parametrize(
        ("bot", "name", "path"),
        [
            (None, None, "/v1/rooms/2/data"),
            ("b1", None, "/v1/rooms/2/bots/b1/data"),
            ("b1", "docUrl", "/v1/botData"),
        ],
    )
    async def test_get_bot_data_routes(
        self, recording_transport, bot: str | None, name: str | None, path: str
    ) -> None:
        """The route depends on which filters are given."""
        transport = recording_transport(httpx.Response(200, json=[]))
        async with make_client(transport) as client:
            await client.get_bot_data(2, bot, name)

        assert transport.requests[0].url.path == path

    async def test_create_bot_data(self, recording_transport) -> None:
        """Room ids are sent as integers."""
        transport = recording_transport(httpx.Response(201))
        async with make_client(transport) as client:
            await client.create_bot_data("10", "b1", "docUrl", "x")

        body = json.loads(transport.requests[0].content)
        assert body == {"name": "docUrl", "roomId": 10, "botId": "b1", "value": "x"}

    async def test_upsert_bot_data(self, recording_transport) -> None:
        """Upserts go to the rooms upsert route."""
        transport = recording_transport(httpx.Response(200))
        async with make_client(transport) as client:
            await client.upsert_bot_data(10, "b1", "docUrl", "x")

        assert transport.requests[0].url.path == "/v1/rooms/botData/upsert"

    async def test_change_bot_data(self, recording_transport) -> None:
        """change_bot_data patches the value."""
        transport = recording_transport(httpx.Response(200))
        async with make_client(transport) as client:
            await client.change_bot_data("d1", "new")

        request = transport.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/v1/botData/d1"
        assert json.loads(request.content) == {"value": "new"}

    async def test_get_and_parse_bot_data(self, recording_transport) -> None:
        """JSON values are decoded."""
        transport = recording_transport(
            httpx.Response(200, json=[{"id": "b1"}]),
            httpx.Response(200, json=[{"value": json.dumps({"test": "test"})}]),
        )
        async with make_client(transport) as client:
            assert await client.get_and_parse_bot_data("123", "quipTest", "data") == {"test": "test"}

    async def test_get_and_parse_bot_data_invalid(self, recording_transport) -> None:
        """Invalid JSON gives None."""
        transport = recording_transport(
            httpx.Response(200, json=[{"id": "b1"}]),
            httpx.Response(200, json=[{"value": "testingblahblah"}]),
        )
        async with make_client(transport) as client:
            assert await client.get_and_parse_bot_data("123", "quipTest", "data") is None

    async def test_get_and_parse_bot_data_missing_args(self, recording_transport) -> None:
        """Missing arguments give None without requests."""
        async with make_client(recording_transport()) as client:
            assert await client.get_and_parse_bot_data(None, None, None) is None  # type: ignore[arg-type]

    async def test_get_or_initialize_existing(self, recording_transport) -> None:
        """Existing data is returned as stored."""
        transport = recording_transport(
            httpx.Response(200, json=[{"id": "b1"}]),
            httpx.Response(200, json=[{"name": "test", "value": '"testing"'}]),
        )
        async with make_client(transport) as client:
            value = await client.get_or_initialize_bot_data(10, "test", "test", {})

        assert json.loads(value) == "testing"

    async def test_get_or_initialize_missing(self, recording_transport) -> None:
        """Missing data is created with the default."""
        transport = recording_transport(
            httpx.Response(200, json=[{"id": "b1"}]),
            httpx.Response(200, json=[]),
            httpx.Response(201, json={"name": "test2", "value": '""'}),
        )
        async with make_client(transport) as client:
            value = await client.get_or_initialize_bot_data(10, "test", "test2", "")

        assert value == ""
        created = json.loads(transport.requests[2].content)
        assert created == {"name": "test2", "roomId": 10, "botId": "b1", "value": '""'}


class TestEvents:
    """Tests for event operations."""

    async def test_get_events_defaults(self, recording_transport) -> None:
        """Events are paged 100 at a time by default."""
        transport = recording_transport(httpx.Response(200, json=[]))
        async with make_client(transport) as client:
            await client.get_events(2)

        assert dict(transport.requests[0].url.params) == {
            "roomId": "2",
            "limit": "100",
            "offset": "0",
        }

    async def test_create_events(self, recording_transport) -> None:
        """Context is only sent when given."""
        transport = recording_transport(httpx.Response(201), httpx.Response(201))
        async with make_client(transport) as client:
            await client.create_events(2, "hello")
            await client.create_events(2, "hello", {"type": "Event"})

        assert json.loads(transport.requests[0].content) == {"log": "hello", "roomId": 2}
        assert json.loads(transport.requests[1].content)["context"] == {"type": "Event"}

    async def test_get_all_events_single_page(self, recording_transport) -> None:
        """When everything fits in one page no more requests are made."""
        transport = recording_transport(
            httpx.Response(200, json=[{"id": 1}], headers={"x-total-count": "1"})
        )
        async with make_client(transport) as client:
            assert await client.get_all_events(2) == [{"id": 1}]

        assert len(transport.requests) == 1

    async def test_get_all_events_pages(self, recording_transport) -> None:
        """Remaining events are fetched by offset."""
        transport = recording_transport(
            httpx.Response(200, json=[{"id": 1}, {"id": 2}], headers={"x-total-count": "3"}),
            httpx.Response(200, json=[{"id": 1}, {"id": 2}]),
            httpx.Response(200, json=[{"id": 3}]),
        )
        async with make_client(transport) as client:
            events = await client.get_all_events(2)

        assert sorted(event["id"] for event in events) == [1, 2, 3]
        offsets = sorted(int(request.url.params["offset"]) for request in transport.requests[1:])
        assert offsets == [0, 2]

    async def test_get_active_users(self, recording_transport) -> None:
        """Only each user's latest event counts."""
        events = [
            {
                "createdAt": "2026-10-19T10:00:00Z",
                "context": {"type": "User", "user": {"id": "u1", "name": "Ann"}, "isActive": True},
            },
            {
                "createdAt": "2026-10-19T11:00:00Z",
                "context": {"type": "User", "user": {"id": "u1", "name": "Ann"}, "isActive": False},
            },
            {
                "createdAt": "2026-10-19T09:00:00Z",
                "context": {"type": "User", "user": {"id": "u2", "name": "Bo"}, "isActive": True},
            },
            {"createdAt": "2026-10-19T12:00:00Z", "context": {"type": "Event"}},
        ]
        transport = recording_transport(httpx.Response(200, json=events))
        async with make_client(transport) as client:
            users = await client.get_active_users(2)

        assert users == {"u2": {"id": "u2", "name": "Bo", "isActive": True}}


class TestIsBotInstalledInRoom:
    """Tests for is_bot_installed_in_room."""

    EVENT = {
        "id": "b44dc350",
        "log": "Room Deactivated",
        "Room": {
            "id": 2,
            "RoomType": {"name": "testRoomType", "Bots": [{"id": "68", "name": "test-bot"}]},
        },
    }

    def test_listed_bot(self) -> None:
        """A bot listed on the room type is installed."""
        assert is_bot_installed_in_room(self.EVENT, "test-bot") is True

    def test_other_bot(self) -> None:
        """Other bots are not."""
        assert is_bot_installed_in_room(self.EVENT, "other-bot") is False

    def test_event_without_room(self) -> None:
        """Events without room information are not matched."""
        assert RefocusClient.is_bot_installed_in_room({}, "test-bot") is False


class TestConstruction:
    """Tests for client construction."""

    async def test_from_settings(self, recording_transport) -> None:
        """The API root and token come from settings."""
        transport = recording_transport(httpx.Response(200, json={}))
        settings = Settings(refocus_url="http://refocus.test/", token="abc")
        async with RefocusClient.from_settings(settings, transport=transport) as client:
            await client.find_bot("b1")

        assert client.api_url == "http://refocus.test/v1"
        assert transport.requests[0].headers["Authorization"] == "abc"
