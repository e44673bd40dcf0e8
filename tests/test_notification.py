"""Tests for SlackNotifier."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from slack_sdk.errors import SlackApiError

from src.core.subscriptions.notification import SlackNotifier


class TestSlackNotifier:
    @pytest.mark.asyncio
    async def test_send_returns_timestamp(self) -> None:
        client = MagicMock()
        client.chat_postMessage = AsyncMock(return_value={"ok": True, "ts": "1700000000.1"})

        ts = await SlackNotifier(client).send("C1", "hello")

        assert ts == "1700000000.1"
        client.chat_postMessage.assert_awaited_once_with(channel="C1", text="hello")

    @pytest.mark.asyncio
    async def test_send_failure_is_logged_not_raised(self, caplog) -> None:
        client = MagicMock()
        client.chat_postMessage = AsyncMock(
            side_effect=SlackApiError("channel_not_found", {"ok": False})
        )

        ts = await SlackNotifier(client).send("C1", "hello")

        assert ts is None
        assert "Failed to post message to C1" in caplog.text
