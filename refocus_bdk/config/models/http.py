"""HTTP transport configuration models."""

from pydantic import BaseModel, Field


class HTTPConfig(BaseModel):
    """Settings for the resilient request primitive.

    Only 429 responses are retried. A request is sent at most
    ``max_attempts`` times in total, first attempt included.
    """

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum number of sends per logical request",
    )
    min_retry_delay_ms: int = Field(
        default=5000,
        ge=0,
        description="Delay used when a 429 response carries no Retry-After hint",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
    auth_scheme: str | None = Field(
        default=None,
        description="Optional scheme prefixed to the token, e.g. 'Bearer'",
    )
