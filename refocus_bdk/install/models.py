"""Bot manifest and install outcome models."""

import json
from enum import Enum
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field


class InstallState(str, Enum):
    """States of the install-or-update flow."""

    ATTEMPT_UPDATE = "attempt_update"
    ATTEMPT_INSTALL = "attempt_install"
    DONE = "done"
    FAILED = "failed"


class InstallPath(str, Enum):
    """Which request registered the bot."""

    UPDATED = "updated"
    INSTALLED = "installed"


class BotManifest(BaseModel):
    """Bot metadata registered with the server.

    The name identifies the bot: an existing bot with the same name is
    updated in place, otherwise a new bot is installed.
    """

    name: str = Field(min_length=1, description="Unique bot name")
    url: str = Field(description="Where the bot is hosted")
    version: str = Field(default="1.0.0", description="Bot version")
    display_name: str | None = Field(default=None, description="Human readable name")
    help_url: str | None = Field(default=None, description="Help page")
    owner_url: str | None = Field(default=None, description="Owner page")
    active: bool = Field(default=False, description="Whether rooms may use the bot")
    actions: list[dict[str, Any]] = Field(default_factory=list)
    data: list[dict[str, Any]] = Field(default_factory=list)
    settings: list[dict[str, Any]] = Field(default_factory=list)
    ui_bundle: Path | None = Field(
        default=None,
        description="Zipped UI attached to the request when the file exists",
    )

    @classmethod
    def from_package_json(
        cls,
        package: dict[str, Any],
        ui_bundle: Path | None = None,
    ) -> "BotManifest":
        """Build an active manifest from a bot's package.json.

        Args:
            package: Parsed package.json; bot fields live under ``metadata``
            ui_bundle: Optional UI bundle path

        Returns:
            Manifest with ``active`` set
        """
        metadata = package.get("metadata") or {}
        return cls(
            name=package["name"],
            url=package["url"],
            version=package.get("version") or "1.0.0",
            display_name=metadata.get("displayName"),
            help_url=metadata.get("helpUrl"),
            owner_url=metadata.get("ownerUrl"),
            active=True,
            actions=metadata.get("actions") or [],
            data=metadata.get("data") or [],
            settings=metadata.get("settings") or [],
            ui_bundle=ui_bundle,
        )

    def to_form_fields(self) -> dict[str, str]:
        """Multipart form fields, list values JSON-encoded."""
        fields = {
            "name": self.name,
            "url": self.url,
            "active": "true" if self.active else "false",
            "version": self.version,
            "actions": json.dumps(self.actions),
            "data": json.dumps(self.data),
            "settings": json.dumps(self.settings),
        }
        if self.display_name is not None:
            fields["displayName"] = self.display_name
        if self.help_url is not None:
            fields["helpUrl"] = self.help_url
        if self.owner_url is not None:
            fields["ownerUrl"] = self.owner_url
        return fields

    def form_files(self) -> dict[str, tuple[str, bytes, str]] | None:
        """The UI bundle as a multipart file, or None when absent."""
        if self.ui_bundle is None or not self.ui_bundle.is_file():
            return None
        return {
            "ui": (self.ui_bundle.name, self.ui_bundle.read_bytes(), "application/zip"),
        }


class InstallResult(BaseModel):
    """Outcome of a successful install or update."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: InstallState = InstallState.DONE
    path: InstallPath
    token: str | None = Field(default=None, description="Server-issued bot token")
    response: httpx.Response = Field(exclude=True)
