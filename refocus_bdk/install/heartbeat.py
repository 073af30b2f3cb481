"""Periodic heartbeat telling the server the bot is alive."""

import asyncio

from refocus_bdk.exceptions import RefocusBDKError
from refocus_bdk.http.requester import RefocusRequester
from refocus_bdk.observability.logging import get_logger

logger = get_logger(__name__)


class Heartbeat:
    """Posts to the heartbeat route at a fixed interval.

    Fire and forget: failed beats are logged and the loop carries on.
    """

    def __init__(
        self,
        requester: RefocusRequester,
        url: str,
        interval_seconds: float,
    ):
        """Initialize the heartbeat.

        Args:
            requester: Request primitive
            url: Heartbeat route of the bot
            interval_seconds: Seconds between beats
        """
        self._requester = requester
        self._url = url
        self._interval = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start beating in a background task."""
        if self._running:
            logger.warning("heartbeat_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("heartbeat_started", url=self._url, interval=self._interval)

    async def stop(self) -> None:
        """Cancel the background task."""
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

        logger.info("heartbeat_stopped")

    async def beat(self) -> bool:
        """Send one heartbeat.

        Returns:
            True if the server acknowledged it
        """
        try:
            response = await self._requester.post(self._url, body={})
        except RefocusBDKError as e:
            logger.warning("heartbeat_failed", url=self._url, error=str(e))
            return False

        if response.is_success:
            logger.debug("heartbeat_sent", url=self._url)
            return True

        logger.warning(
            "heartbeat_rejected",
            url=self._url,
            status_code=response.status_code,
        )
        return False

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.beat()
            except Exception as e:
                logger.error("heartbeat_loop_error", url=self._url, error=str(e))

            await asyncio.sleep(self._interval)
