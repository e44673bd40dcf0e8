# src/utils/logging.py
"""Structured logging with JSON format and command correlation support.

Provides:
- JSON-formatted log output for structured logging
- Per-command correlation ID and channel ID via ContextVar, so log lines
  from a cascade's concurrent writes can be tied back to one command
- Centralized logger configuration
"""

import json
import logging
import uuid
from contextvars import ContextVar
from typing import Any

command_id_var: ContextVar[str] = ContextVar("command_id", default="")
channel_id_var: ContextVar[str] = ContextVar("channel_id", default="")


def set_command_context(channel_id: str, command_id: str | None = None) -> str:
    """Set the correlation context for the command being handled.

    Args:
        channel_id: Channel the command was issued from.
        command_id: Correlation ID (e.g. Slack trigger_id). A random ID
            is generated when omitted.

    Returns:
        The command ID in effect.
    """
    command_id = command_id or uuid.uuid4().hex[:12]
    command_id_var.set(command_id)
    channel_id_var.set(channel_id)
    return command_id


def get_command_id() -> str:
    """Get the correlation ID of the current command, or empty string."""
    return command_id_var.get()


def get_channel_id() -> str:
    """Get the channel ID of the current command, or empty string."""
    return channel_id_var.get()


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON with timestamp, level, logger name,
    message, and the command_id/channel_id of the current command.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        command_id = get_command_id()
        if command_id:
            log_data["command_id"] = command_id
        channel_id = get_channel_id()
        if channel_id:
            log_data["channel_id"] = channel_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(level: str | int = logging.INFO, structured: bool = True) -> None:
    """Configure application logging on the root logger.

    Args:
        level: Logging level name or number.
        structured: Emit JSON lines when True, plain text otherwise.
    """
    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logging.root.addHandler(handler)
    logging.root.setLevel(level.upper() if isinstance(level, str) else level)
