# src/interfaces/slack/handlers.py
"""Slash command handlers for the Slack bot.

The handler runs the command to completion and then acks with the reply,
so the caller sees either nothing (the confirmation is posted to the
channel) or a short error/help message.
"""

import logging
from collections.abc import Callable
from typing import Any

from src.core.subscriptions.dispatcher import CommandResponse
from src.core.subscriptions.factory import create_dispatcher
from src.core.subscriptions.notification import SlackNotifier

logger = logging.getLogger(__name__)


async def _ack_with_response(ack: Callable, response: CommandResponse) -> None:
    """Ack a slash command with a CommandResponse."""
    if response.blocks is not None:
        await ack(blocks=response.blocks)
    elif response.text is not None:
        await ack(text=response.text)
    else:
        await ack()


async def handle_okr_command(ack: Callable, command: dict[str, Any], client: Any) -> None:
    """Handle the `/okr` slash command.

    Args:
        ack: Slack ack function.
        command: Slash command payload (text, channel_id, channel_name, ...).
        client: Slack AsyncWebClient used for confirmation messages.
    """
    dispatcher = create_dispatcher(SlackNotifier(client))
    response = await dispatcher.dispatch(
        command.get("text", ""),
        channel_id=command["channel_id"],
        channel_name=command.get("channel_name", ""),
        command_id=command.get("trigger_id"),
    )
    await _ack_with_response(ack, response)
