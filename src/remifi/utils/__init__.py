"""Utility modules."""

from remifi.utils.locks import KeyedLock, keyed_lock, clear_keyed_locks
from remifi.utils.polling import PollResult, PollState, Poller

__all__ = [
    "KeyedLock",
    "keyed_lock",
    "clear_keyed_locks",
    "PollResult",
    "PollState",
    "Poller",
]
