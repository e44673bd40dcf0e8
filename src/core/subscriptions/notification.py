# src/core/subscriptions/notification.py
"""Notification protocol for subscription confirmations.

Provides an abstraction layer for posting confirmation messages to the
channel a command came from, so the dispatcher does not depend on the
Slack client directly.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationProtocol(Protocol):
    """Protocol for sending confirmation messages.

    Implementations must never raise: delivery is fire-and-forget and a
    failure must not change the outcome of the command.
    """

    async def send(self, channel_id: str, message: str) -> str | None:
        """Send a message to a channel.

        Args:
            channel_id: Target channel identifier.
            message: Message content to send.

        Returns:
            Message identifier (e.g., timestamp) or None on failure.
        """
        ...


class SlackNotifier:
    """Slack implementation of NotificationProtocol.

    Wraps a Slack AsyncWebClient to implement the notification protocol.
    """

    def __init__(self, client: Any) -> None:
        """Initialize with a Slack client.

        Args:
            client: Slack AsyncWebClient instance.
        """
        self._client = client

    async def send(self, channel_id: str, message: str) -> str | None:
        """Post a Slack message.

        Args:
            channel_id: Slack channel ID.
            message: Message text.

        Returns:
            Message timestamp or None on failure.
        """
        try:
            result = await self._client.chat_postMessage(
                channel=channel_id,
                text=message,
            )
        except Exception as e:
            logger.warning("Failed to post message to %s: %s", channel_id, e)
            return None

        ts = result.get("ts")
        logger.info("Sent message %s to channel %s", ts, channel_id)
        return ts
