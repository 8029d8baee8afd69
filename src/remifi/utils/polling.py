"""Bounded polling primitive.

A poll runs ``check`` until it reports a terminal state, sleeping a fixed
interval between attempts:

    pending -> confirmed | failed | timed_out

Transaction confirmation and attestation waiting both use it.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PollState(str, Enum):
    """State of a poll."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class PollResult(Generic[T]):
    """Terminal outcome of a poll."""

    state: PollState
    value: Optional[T]
    attempts: int

    @property
    def confirmed(self) -> bool:
        return self.state == PollState.CONFIRMED


class Poller:
    """Fixed-interval poller with an optional attempt ceiling."""

    def __init__(self, interval: float, max_attempts: Optional[int] = None, name: str = "poll"):
        """Initialize poller.

        Args:
            interval: Seconds to sleep between attempts
            max_attempts: Attempt ceiling (None or 0 = poll until terminal)
            name: Label used in log messages
        """
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self.max_attempts = max_attempts or None
        self.name = name

    async def run(self, check: Callable[[], Awaitable[tuple[PollState, Optional[T]]]]) -> PollResult[T]:
        """Poll until check returns a terminal state or the ceiling is hit.

        ``check`` returns ``(state, value)``; exceptions it raises propagate
        immediately. No sleep happens after the final attempt.
        """
        attempts = 0
        value: Optional[T] = None

        while True:
            attempts += 1
            state, value = await check()

            if state != PollState.PENDING:
                logger.debug(f"{self.name}: {state.value} after {attempts} attempt(s)")
                return PollResult(state=state, value=value, attempts=attempts)

            if self.max_attempts is not None and attempts >= self.max_attempts:
                logger.warning(f"{self.name}: timed out after {attempts} attempt(s)")
                return PollResult(state=PollState.TIMED_OUT, value=value, attempts=attempts)

            logger.debug(
                f"{self.name}: pending (attempt {attempts}"
                f"{f'/{self.max_attempts}' if self.max_attempts else ''})"
            )
            await asyncio.sleep(self.interval)
