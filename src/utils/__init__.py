# src/utils/__init__.py
"""Utility functions for the OKR notifier."""

from src.utils.logging import (
    configure_logging,
    get_channel_id,
    get_command_id,
    set_command_context,
)

__all__ = [
    "configure_logging",
    "get_channel_id",
    "get_command_id",
    "set_command_context",
]
