"""Realtime and polling configuration models."""

from pydantic import BaseModel, Field


class RealtimeConfig(BaseModel):
    """How the bot receives realtime events."""

    use_polling: bool = Field(
        default=False,
        description="Poll the REST API instead of using the socket transport",
    )
    polling_delay_seconds: float = Field(
        default=8.0,
        gt=0,
        description="Only bot actions updated more recently than this are emitted",
    )
    polling_refresh_ms: int = Field(
        default=5000,
        gt=0,
        description="Interval between two polling cycles",
    )
