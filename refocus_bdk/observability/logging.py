"""Structured logging configuration using structlog.

Console or JSON rendering, optional daily-rotated log files, and
redaction of bot tokens and other secrets before anything is written.
"""

import logging
import sys
from collections.abc import MutableMapping
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Key names whose values never reach a log line
SECRET_KEYS: frozenset[str] = frozenset({
    "token",
    "api_token",
    "socket_token",
    "authorization",
    "password",
    "secret",
    "api_key",
    "access_token",
    "refresh_token",
    "bearer",
})

LOG_FILE_NAME = "bdk-results.log"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class SecretRedactor:
    """Processor that masks secret values by key name, recursively."""

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_dict(event_dict))

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SECRET_KEYS and value is not None:
                result[key] = "[REDACTED]"
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self._redact_dict(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                result[key] = value
        return result


def _configure_stdlib_handlers(
    destination: str,
    console_level: int,
    file_level: int,
    log_dir: str,
) -> None:
    """Attach console and/or rotating file handlers to the root logger."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(min(console_level, file_level))

    formatter = logging.Formatter("%(message)s")

    if destination in ("console", "both"):
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(console_level)
        console.setFormatter(formatter)
        root.addHandler(console)

    if destination in ("file", "both"):
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            directory / LOG_FILE_NAME,
            when="midnight",
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def setup_logging(
    level: str = "INFO",
    format: str = "console",
    destination: str = "console",
    file_level: str = "DEBUG",
    log_dir: str = "log",
    redact_secrets: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum console log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" or "console"
        destination: "console", "file", "both" or "none"
        file_level: Minimum level written to the log file
        log_dir: Directory holding the rotated log file
        redact_secrets: Whether to mask tokens and passwords
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_secrets:
        processors.append(SecretRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        colors = destination == "console"
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    console_level = LEVELS.get(level.upper(), logging.INFO)
    file_level_num = LEVELS.get(file_level.upper(), logging.DEBUG)

    if destination == "none":
        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
            logger_factory=structlog.ReturnLoggerFactory(),
            cache_logger_on_first_use=False,
        )
        return

    if destination == "console":
        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(console_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(sys.stderr),
            cache_logger_on_first_use=False,
        )
        return

    # File output needs stdlib handlers so each sink gets its own level
    _configure_stdlib_handlers(destination, console_level, file_level_num, log_dir)
    effective = file_level_num if destination == "file" else min(console_level, file_level_num)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(effective),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        A bound structlog logger
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def log_realtime(logger: structlog.stdlib.BoundLogger, label: str, entity: Any) -> None:
    """Log a realtime entity: its name at info, the whole payload at debug."""
    name = None
    if isinstance(entity, dict):
        inner = entity.get("new") if isinstance(entity.get("new"), dict) else entity
        name = inner.get("name")
    logger.info("realtime", label=label, name=name)
    logger.debug("realtime_payload", label=label, payload=entity)
