# src/interfaces/slack/bot.py
"""Slack bot implementation with AsyncApp and AsyncSocketModeHandler.

Registers the `/okr` slash command (configurable via SLASH_COMMAND) and
runs the app in Socket Mode.
"""

import asyncio
import logging

from dotenv import load_dotenv
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from src.config import settings
from src.interfaces.slack.handlers import handle_okr_command
from src.utils.logging import configure_logging
from src.utils.observability import setup_logfire

logger = logging.getLogger(__name__)


def register_commands(app: AsyncApp, command: str | None = None) -> AsyncApp:
    """Register slash command handlers on an app.

    Args:
        app: AsyncApp to register on.
        command: Slash command name. Defaults to settings.slash_command.

    Returns:
        The same app.
    """
    app.command(command or settings.slash_command)(handle_okr_command)
    return app


def create_bot(
    bot_token: str | None = None, app_token: str | None = None
) -> tuple[AsyncApp, AsyncSocketModeHandler]:
    """Create and configure the Slack bot.

    Args:
        bot_token: Slack bot token (xoxb-*). Defaults to SLACK_BOT_TOKEN env var.
        app_token: Slack app token (xapp-*). Defaults to SLACK_APP_TOKEN env var.

    Returns:
        Tuple of (AsyncApp instance, AsyncSocketModeHandler instance).
    """
    resolved_bot_token = bot_token or settings.slack_bot_token
    resolved_app_token = app_token or settings.slack_app_token

    app = register_commands(AsyncApp(token=resolved_bot_token))
    handler = AsyncSocketModeHandler(app, resolved_app_token)
    return app, handler


async def start_bot(bot_token: str | None = None, app_token: str | None = None) -> None:
    """Start the Slack bot with Socket Mode."""
    _, handler = create_bot(bot_token, app_token)

    logger.info("Starting Slack bot with Socket Mode...")
    try:
        await handler.start_async()
    except asyncio.CancelledError:
        logger.info("Received shutdown signal")
    finally:
        await handler.close_async()
        logger.info("Slack bot stopped")


def main() -> None:
    """Entry point with graceful shutdown handling."""
    load_dotenv()
    configure_logging(settings.log_level, structured=settings.structured_logging)
    setup_logfire()

    try:
        asyncio.run(start_bot())
    except KeyboardInterrupt:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
