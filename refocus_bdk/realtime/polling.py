"""Polling fallback for bots that cannot hold a realtime connection."""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from refocus_bdk.client import RefocusClient
from refocus_bdk.observability.logging import get_logger
from refocus_bdk.realtime.dispatcher import RealtimeDispatcher
from refocus_bdk.realtime.events import BOT_ACTION_ADD
from refocus_bdk.routes import bot_actions_route, with_query

logger = get_logger(__name__)

DEFAULT_POLLING_DELAY_SECONDS = 8.0
DEFAULT_POLLING_REFRESH_MS = 5000


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_fresh_pending_action(
    action: dict[str, Any],
    now: datetime,
    polling_delay_seconds: float,
) -> bool:
    """Whether a polled bot action still needs an answer.

    Args:
        action: Bot action from the server
        now: Current time
        polling_delay_seconds: Maximum age of ``updatedAt``

    Returns:
        True for pending, unanswered actions updated recently
    """
    if not action.get("isPending") or action.get("response"):
        return False
    updated_at = _parse_timestamp(action.get("updatedAt"))
    if updated_at is None:
        return False
    return (now - updated_at).total_seconds() < polling_delay_seconds


class PollingListener:
    """Polls pending bot actions and feeds them to the dispatcher."""

    def __init__(
        self,
        client: RefocusClient,
        dispatcher: RealtimeDispatcher,
        bot_id: str | None = None,
        polling_delay_seconds: float = DEFAULT_POLLING_DELAY_SECONDS,
        polling_refresh_ms: int = DEFAULT_POLLING_REFRESH_MS,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        """Initialize the listener.

        Args:
            client: REST client
            dispatcher: Receives fresh bot actions
            bot_id: Only poll actions of this bot when set
            polling_delay_seconds: Maximum age of a polled action
            polling_refresh_ms: Time between polls
            clock: Returns the current time
        """
        self._client = client
        self._dispatcher = dispatcher
        self._bot_id = bot_id
        self._polling_delay = polling_delay_seconds
        self._refresh_seconds = polling_refresh_ms / 1000
        self._clock = clock
        self._running = False
        self._task: asyncio.Task | None = None

    async def poll_once(self) -> int:
        """Run one polling cycle.

        Returns:
            Number of actions handed to handlers
        """
        url = with_query(
            bot_actions_route(self._client.api_url),
            botId=self._bot_id,
            isPending="true",
        )
        response = await self._client.requester.get(url)
        if not response.is_success:
            logger.warning("polling_request_failed", status_code=response.status_code)
            return 0

        try:
            actions = response.json()
        except ValueError:
            logger.warning("polling_invalid_body")
            return 0
        if not isinstance(actions, list):
            return 0

        now = self._clock()
        delivered = 0
        for action in actions:
            if not isinstance(action, dict):
                continue
            if not is_fresh_pending_action(action, now, self._polling_delay):
                continue
            if await self._dispatcher.dispatch(BOT_ACTION_ADD, action):
                delivered += 1
        return delivered

    async def start(self) -> None:
        """Start polling in a background task."""
        if self._running:
            logger.warning("polling_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            "polling_started",
            bot_id=self._bot_id,
            refresh_seconds=self._refresh_seconds,
        )

    async def stop(self) -> None:
        """Stop polling."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("polling_stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error("polling_loop_error", error=str(e))

            await asyncio.sleep(self._refresh_seconds)
