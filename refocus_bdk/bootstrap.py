"""Bootstrap module for wiring a bot from configuration.

Builds every kit component from one Settings object:
- Logging, as configured under ``[logging]``
- The REST requester and client
- The event dedup cache for the configured backend
- The realtime dispatcher and, when enabled, the polling listener
- The bot installer

Example usage:

    from refocus_bdk.bootstrap import bootstrap
    from refocus_bdk.realtime import Topic

    kit = await bootstrap()
    kit.dispatcher.on(Topic.BOT_ACTIONS, handle_action)
    await kit.installer.install_package(package_json)
    await kit.start()
"""

from dataclasses import dataclass
from typing import Any

import httpx

from refocus_bdk.cache.event_cache import EventCache
from refocus_bdk.cache.factory import build_event_cache
from refocus_bdk.client import RefocusClient
from refocus_bdk.config import get_settings
from refocus_bdk.config.settings import Settings
from refocus_bdk.install.orchestrator import BotInstaller
from refocus_bdk.observability.logging import get_logger, setup_logging
from refocus_bdk.realtime.dispatcher import RealtimeDispatcher
from refocus_bdk.realtime.polling import PollingListener

logger = get_logger(__name__)


@dataclass
class BotKit:
    """Components built by bootstrap, sharing one requester."""

    settings: Settings
    client: RefocusClient
    cache: EventCache
    dispatcher: RealtimeDispatcher
    installer: BotInstaller
    polling: PollingListener | None = None

    async def start(self) -> None:
        """Start background listeners."""
        if self.polling is not None:
            await self.polling.start()

    async def close(self) -> None:
        """Stop background tasks and release connections."""
        if self.polling is not None:
            await self.polling.stop()
        await self.installer.stop()
        if self.cache.store is not None:
            await self.cache.store.close()
        await self.client.close()
        logger.info("bot_kit_closed")

    async def __aenter__(self) -> "BotKit":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


async def bootstrap(
    settings: Settings | None = None,
    bot_id: str | None = None,
    configure_logging: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BotKit:
    """Build a BotKit from settings.

    Args:
        settings: Kit settings (default: get_settings())
        bot_id: Restricts polling to this bot's actions
        configure_logging: Apply the ``[logging]`` settings
        transport: Custom httpx transport for every REST call

    Returns:
        Wired BotKit; call ``start()`` to begin polling
    """
    settings = settings or get_settings()

    if configure_logging:
        setup_logging(**settings.logging.model_dump())

    client = RefocusClient.from_settings(settings, transport=transport)
    cache = await build_event_cache(settings.cache)
    consumer_id = settings.bot_name or "bot"
    dispatcher = RealtimeDispatcher(cache, consumer_id=consumer_id)
    installer = BotInstaller(
        client.requester,
        client.api_url,
        heartbeat_interval_seconds=settings.install.heartbeat_interval_seconds,
        ui_bundle=settings.install.ui_bundle,
    )

    polling = None
    if settings.realtime.use_polling:
        polling = PollingListener(
            client,
            dispatcher,
            bot_id=bot_id,
            polling_delay_seconds=settings.realtime.polling_delay_seconds,
            polling_refresh_ms=settings.realtime.polling_refresh_ms,
        )

    logger.info(
        "bot_kit_bootstrapped",
        refocus_url=settings.refocus_url,
        bot=consumer_id,
        cache_backend=settings.cache.backend,
        polling=polling is not None,
    )

    return BotKit(
        settings=settings,
        client=client,
        cache=cache,
        dispatcher=dispatcher,
        installer=installer,
        polling=polling,
    )
