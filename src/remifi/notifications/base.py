"""Progress notifier interface.

Orchestrators push human-readable progress to the chat layer through a
notifier. Delivery is best-effort: a failed notification is logged and never
aborts the operation that sent it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

logger = logging.getLogger(__name__)

ConversationId = Union[int, str]


class ProgressNotifier(ABC):
    """Sink for step-by-step progress messages."""

    @abstractmethod
    async def notify(self, conversation_id: Optional[ConversationId], text: str) -> bool:
        """Deliver a message.

        Returns:
            True if the message was delivered
        """
        raise NotImplementedError()


class LoggingNotifier(ProgressNotifier):
    """Notifier that only writes progress to the log."""

    async def notify(self, conversation_id: Optional[ConversationId], text: str) -> bool:
        logger.info(f"[{conversation_id}] {text}")
        return True


async def notify_safely(
    notifier: Optional[ProgressNotifier],
    conversation_id: Optional[ConversationId],
    text: str,
) -> bool:
    """Send a notification, logging and ignoring any delivery failure."""
    if notifier is None or conversation_id is None:
        logger.debug(f"Progress (no conversation): {text}")
        return False

    try:
        return bool(await notifier.notify(conversation_id, text))
    except Exception as e:
        logger.warning(f"Progress notification to {conversation_id} failed: {e}")
        return False
