"""Bot installation: manifest, install-or-update orchestration, heartbeat."""

from refocus_bdk.install.heartbeat import Heartbeat
from refocus_bdk.install.models import (
    BotManifest,
    InstallPath,
    InstallResult,
    InstallState,
)
from refocus_bdk.install.orchestrator import BotInstaller

__all__ = [
    "BotInstaller",
    "BotManifest",
    "Heartbeat",
    "InstallPath",
    "InstallResult",
    "InstallState",
]
