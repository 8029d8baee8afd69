"""Telegram progress notifier.

Delivers orchestrator progress to the user's chat. Uses a singleton pattern
to share the bot instance.
"""

import asyncio
import logging
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError

from remifi.config import get_settings
from remifi.notifications.base import ConversationId, ProgressNotifier

logger = logging.getLogger(__name__)

# Singleton bot instance
_bot_instance: Optional[Bot] = None
_bot_lock = asyncio.Lock()


async def get_bot() -> Optional[Bot]:
    """Get or create the bot instance for notifications."""
    global _bot_instance

    if _bot_instance is not None:
        return _bot_instance

    async with _bot_lock:
        # Double-check after acquiring lock
        if _bot_instance is not None:
            return _bot_instance

        settings = get_settings()
        if not settings.telegram_bot_token:
            logger.warning("Telegram bot token not configured - notifications disabled")
            return None

        _bot_instance = Bot(token=settings.telegram_bot_token)
        return _bot_instance


async def close_bot() -> None:
    """Close the bot session (call on shutdown)."""
    global _bot_instance
    if _bot_instance is not None:
        await _bot_instance.session.close()
        _bot_instance = None


class TelegramNotifier(ProgressNotifier):
    """Sends progress messages to Telegram chats."""

    def __init__(self, bot: Optional[Bot] = None):
        """Initialize with optional bot instance.

        If no bot provided, will use the singleton instance.
        """
        self._bot = bot

    async def _get_bot(self) -> Optional[Bot]:
        if self._bot:
            return self._bot
        return await get_bot()

    async def notify(self, conversation_id: Optional[ConversationId], text: str) -> bool:
        """Send a plain-text message to a chat.

        Returns:
            True if message was sent successfully
        """
        if conversation_id is None:
            return False

        bot = await self._get_bot()
        if not bot:
            logger.warning("Cannot send notification - bot not initialized")
            return False

        try:
            await bot.send_message(chat_id=conversation_id, text=text)
            return True
        except TelegramForbiddenError:
            logger.warning(f"Chat {conversation_id} has blocked the bot")
            return False
        except TelegramBadRequest as e:
            logger.error(f"Bad request sending to {conversation_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to send notification to {conversation_id}: {e}")
            return False
