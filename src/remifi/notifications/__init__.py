"""Progress notifiers."""

from typing import Optional

from remifi.config import get_settings
from remifi.notifications.base import (
    ConversationId,
    LoggingNotifier,
    ProgressNotifier,
    notify_safely,
)
from remifi.notifications.telegram import TelegramNotifier

# Global notifier instance
_notifier: Optional[ProgressNotifier] = None


def get_notifier() -> ProgressNotifier:
    """Get the global notifier (Telegram when a bot token is configured)."""
    global _notifier
    if _notifier is None:
        if get_settings().telegram_bot_token:
            _notifier = TelegramNotifier()
        else:
            _notifier = LoggingNotifier()
    return _notifier


def reset_notifier() -> None:
    """Reset notifier instance (useful for testing)."""
    global _notifier
    _notifier = None


__all__ = [
    "ConversationId",
    "LoggingNotifier",
    "ProgressNotifier",
    "TelegramNotifier",
    "get_notifier",
    "notify_safely",
    "reset_notifier",
]
