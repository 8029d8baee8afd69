"""Tests for the progress notifiers."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError

from remifi.notifications import (
    LoggingNotifier,
    ProgressNotifier,
    TelegramNotifier,
    get_notifier,
    notify_safely,
)


class TestTelegramNotifier:
    """Tests for TelegramNotifier."""

    @pytest.mark.asyncio
    async def test_sends_plain_text(self):
        mock_bot = AsyncMock()
        notifier = TelegramNotifier(bot=mock_bot)

        result = await notifier.notify(123456789, "Step 1/4: Approving USDC transfer...")

        assert result is True
        mock_bot.send_message.assert_awaited_once_with(
            chat_id=123456789, text="Step 1/4: Approving USDC transfer..."
        )

    @pytest.mark.asyncio
    async def test_handles_blocked_user(self):
        mock_bot = AsyncMock()
        mock_bot.send_message = AsyncMock(
            side_effect=TelegramForbiddenError(
                method=MagicMock(), message="Forbidden: bot was blocked by the user"
            )
        )

        result = await TelegramNotifier(bot=mock_bot).notify(123456789, "hello")

        assert result is False

    @pytest.mark.asyncio
    async def test_handles_bad_request(self):
        mock_bot = AsyncMock()
        mock_bot.send_message = AsyncMock(
            side_effect=TelegramBadRequest(method=MagicMock(), message="Bad Request: chat not found")
        )

        assert await TelegramNotifier(bot=mock_bot).notify(1, "hello") is False

    @pytest.mark.asyncio
    async def test_handles_unexpected_errors(self):
        mock_bot = AsyncMock()
        mock_bot.send_message = AsyncMock(side_effect=ConnectionError("network down"))

        assert await TelegramNotifier(bot=mock_bot).notify(1, "hello") is False

    @pytest.mark.asyncio
    async def test_no_bot_configured(self):
        notifier = TelegramNotifier(bot=None)

        with patch("remifi.notifications.telegram.get_bot", new=AsyncMock(return_value=None)):
            result = await notifier.notify(123456789, "hello")

        assert result is False


class TestNotifySafely:
    """Delivery failures never escape notify_safely."""

    @pytest.mark.asyncio
    async def test_swallows_exceptions(self):
        class Exploding(ProgressNotifier):
            async def notify(self, conversation_id, text):
                raise RuntimeError("boom")

        assert await notify_safely(Exploding(), 1, "hello") is False

    @pytest.mark.asyncio
    async def test_without_notifier_or_conversation(self):
        notifier = AsyncMock()

        assert await notify_safely(None, 1, "hello") is False
        assert await notify_safely(notifier, None, "hello") is False
        notifier.notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_logging_notifier(self):
        assert await notify_safely(LoggingNotifier(), 1, "hello") is True

    def test_default_notifier_without_token(self):
        assert isinstance(get_notifier(), LoggingNotifier)
