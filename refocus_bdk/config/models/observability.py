"""Logging configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]
LogDestination = Literal["console", "file", "both", "none"]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Console log level")
    format: LogFormat = Field(default="console", description="Output format")
    destination: LogDestination = Field(
        default="console",
        description="Where log lines go",
    )
    file_level: LogLevel = Field(default="DEBUG", description="File log level")
    log_dir: str = Field(default="log", description="Directory for log files")
    redact_secrets: bool = Field(
        default=True,
        description="Mask tokens and passwords in log events",
    )
