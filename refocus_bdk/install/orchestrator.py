"""Install-or-update orchestration for bot metadata.

Updating is the common case, so it is tried first. A 404 means the bot
does not exist yet and triggers an install; any other failure stops the
flow with an error naming the step that failed.
"""

import asyncio
from pathlib import Path
from typing import Any

import httpx

from refocus_bdk.exceptions import (
    BotInstallError,
    BotUpdateError,
    BotValidationError,
    DuplicateBotError,
)
from refocus_bdk.http.requester import RefocusRequester
from refocus_bdk.install.heartbeat import Heartbeat
from refocus_bdk.install.models import (
    BotManifest,
    InstallPath,
    InstallResult,
    InstallState,
)
from refocus_bdk.observability.logging import get_logger
from refocus_bdk.observability.metrics import BOT_INSTALLS
from refocus_bdk.routes import bot_heartbeat_route, bot_route, bots_route

logger = get_logger(__name__)

SUCCESS_CODES = frozenset({200, 201})
NOT_FOUND = 404
DUPLICATE_NAME_MESSAGE = "name must be unique"
VALIDATION_ERROR_TYPE = "SequelizeValidationError"

FormParts = tuple[dict[str, str], dict[str, tuple[str, bytes, str]]]


def _first_error(response: httpx.Response) -> dict[str, Any]:
    """Return the first entry of the ``errors`` array, or an empty dict."""
    try:
        body = response.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return errors[0]
    return {}


def _token_from(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        token = body.get("token")
        return token if isinstance(token, str) else None
    return None


class BotInstaller:
    """Registers a bot with the server.

    Attributes:
        token: Token issued by the server on the last successful call
    """

    def __init__(
        self,
        requester: RefocusRequester,
        api_url: str,
        heartbeat_interval_seconds: float | None = None,
        ui_bundle: Path | None = None,
    ):
        """Initialize the installer.

        Args:
            requester: Request primitive used for every call
            api_url: Versioned API root, e.g. "http://localhost:3000/v1"
            heartbeat_interval_seconds: Start a heartbeat after success when set
            ui_bundle: UI bundle attached to manifests built from package.json
        """
        self._requester = requester
        self._api_url = api_url.rstrip("/")
        self._heartbeat_interval = heartbeat_interval_seconds
        self._ui_bundle = ui_bundle
        self.token: str | None = None
        self.heartbeat: Heartbeat | None = None

    async def _update(self, manifest: BotManifest, form: FormParts) -> httpx.Response:
        fields, files = form
        return await self._requester.put(
            bot_route(self._api_url, manifest.name), body=fields, files=files
        )

    async def _install(self, manifest: BotManifest, form: FormParts) -> httpx.Response:
        fields, files = form
        return await self._requester.post(bots_route(self._api_url), body=fields, files=files)

    async def install_or_update(self, manifest: BotManifest) -> InstallResult:
        """Update the bot, or install it if the server does not know it.

        Args:
            manifest: Bot metadata

        Returns:
            InstallResult with the path taken and the issued token

        Raises:
            BotValidationError: The server rejected the update as invalid
            BotUpdateError: The update failed with something other than 404
            DuplicateBotError: The install clashed with an existing name
            BotInstallError: The install failed
            RefocusTransportError: The server could not be reached
        """
        # One read of the bundle serves both attempts
        files = await asyncio.to_thread(manifest.form_files)
        form: FormParts = (manifest.to_form_fields(), files or {})

        state = InstallState.ATTEMPT_UPDATE
        response = await self._update(manifest, form)

        if response.status_code in SUCCESS_CODES:
            logger.info("bot_updated", bot=manifest.name, url=self._api_url)
            return await self._finish(manifest, InstallPath.UPDATED, response)

        if response.status_code != NOT_FOUND:
            BOT_INSTALLS.labels(path=InstallPath.UPDATED.value, outcome="failed").inc()
            error = _first_error(response)
            logger.error(
                "bot_update_failed",
                bot=manifest.name,
                status_code=response.status_code,
                error=error or None,
            )
            if error.get("type") == VALIDATION_ERROR_TYPE:
                raise BotValidationError(
                    f"Bot {manifest.name} failed validation",
                    state=state,
                    status_code=response.status_code,
                    details=error,
                )
            raise BotUpdateError(
                f"Something went wrong while updating {manifest.name}",
                state=state,
                status_code=response.status_code,
                details=error or None,
            )

        logger.warning("bot_not_found_installing", bot=manifest.name)
        state = InstallState.ATTEMPT_INSTALL
        response = await self._install(manifest, form)

        if response.status_code in SUCCESS_CODES:
            logger.info("bot_installed", bot=manifest.name, url=self._api_url)
            return await self._finish(manifest, InstallPath.INSTALLED, response)

        BOT_INSTALLS.labels(path=InstallPath.INSTALLED.value, outcome="failed").inc()
        error = _first_error(response)
        logger.error(
            "bot_install_failed",
            bot=manifest.name,
            status_code=response.status_code,
            error=error or None,
        )
        if error.get("message") == DUPLICATE_NAME_MESSAGE:
            raise DuplicateBotError(
                f"Bot {manifest.name} already exists",
                state=state,
                status_code=response.status_code,
                details=error,
            )
        raise BotInstallError(
            f"Unable to install bot {manifest.name}",
            state=state,
            status_code=response.status_code,
            details=error or None,
        )

    async def install_package(self, package: dict[str, Any]) -> InstallResult:
        """Install or update the bot described by a package.json dict."""
        manifest = BotManifest.from_package_json(package, ui_bundle=self._ui_bundle)
        return await self.install_or_update(manifest)

    async def _finish(
        self,
        manifest: BotManifest,
        path: InstallPath,
        response: httpx.Response,
    ) -> InstallResult:
        BOT_INSTALLS.labels(path=path.value, outcome="success").inc()
        token = _token_from(response)
        if token is not None:
            self.token = token
            logger.info("bot_token_issued", bot=manifest.name, token=token)

        if self._heartbeat_interval is not None and self.heartbeat is None:
            self.heartbeat = Heartbeat(
                self._requester,
                bot_heartbeat_route(self._api_url, manifest.name),
                interval_seconds=self._heartbeat_interval,
            )
            await self.heartbeat.start()

        return InstallResult(
            state=InstallState.DONE,
            path=path,
            token=token,
            response=response,
        )

    async def stop(self) -> None:
        """Stop the heartbeat, if one is running."""
        if self.heartbeat is not None:
            await self.heartbeat.stop()
            self.heartbeat = None
