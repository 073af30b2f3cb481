"""Exception hierarchy for the bot development kit.

All errors raised by the kit derive from RefocusBDKError, so bots can
catch one type at their top level.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from refocus_bdk.install.models import InstallState


class RefocusBDKError(Exception):
    """Base exception for kit errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class RefocusTransportError(RefocusBDKError):
    """Raised when a request produced no usable response.

    Covers DNS failures, refused connections, timeouts, redirect loops and
    undecodable bodies. The underlying httpx exception is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, method: str, url: str):
        super().__init__(message)
        self.method = method
        self.url = url


class BotInstallationError(RefocusBDKError):
    """Base for install/update orchestration failures."""

    def __init__(
        self,
        message: str,
        state: "InstallState",
        status_code: int | None = None,
        details: Any = None,
    ):
        super().__init__(message, status_code=status_code, details=details)
        self.state = state


class BotUpdateError(BotInstallationError):
    """Updating an existing bot failed with something other than 404."""


class BotValidationError(BotUpdateError):
    """The server rejected the updated bot metadata as invalid."""


class BotInstallError(BotInstallationError):
    """Installing a new bot failed."""


class DuplicateBotError(BotInstallError):
    """A bot with the same name already exists."""


class RealtimeFrameError(RefocusBDKError):
    """A realtime frame could not be parsed into an entity."""

    def __init__(self, message: str, event_name: str, details: Any = None):
        super().__init__(message, details=details)
        self.event_name = event_name
