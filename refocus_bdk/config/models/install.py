"""Bot installation configuration models."""

from pathlib import Path

from pydantic import BaseModel, Field


class InstallConfig(BaseModel):
    """Settings for installing and updating bot metadata."""

    ui_bundle: Path | None = Field(
        default=Path("web/dist/bot.zip"),
        description="UI bundle attached to install/update requests when it exists",
    )
    heartbeat_interval_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Heartbeat period after a successful install; None disables it",
    )
