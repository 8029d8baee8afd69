"""In-process keyed locks.

Used to serialize transfers from one source wallet and to single-flight the
check-then-create steps of the on-ramp flow for one user. These locks only
cover a single process; the external stores remain the source of truth.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from remifi.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

# Global lock registry: key -> asyncio.Lock
_locks: dict[str, asyncio.Lock] = {}
# KeyedLock holders and waiters per key
_users: dict[str, int] = {}
_registry_lock = asyncio.Lock()


async def get_lock(key: str) -> asyncio.Lock:
    """Get or create the lock for a key.

    Args:
        key: Lock key, e.g. ``wallet:<id>`` or ``user:<id>:onramp``

    Returns:
        asyncio.Lock for the key
    """
    async with _registry_lock:
        if key not in _locks:
            _locks[key] = asyncio.Lock()
        return _locks[key]


class KeyedLock:
    """Context manager for exclusive access to a keyed resource.

    Example:
        async with KeyedLock(f"wallet:{wallet_id}", operation="bridge"):
            await orchestrator.run(state)
    """

    def __init__(
        self,
        key: str,
        timeout: Optional[float] = None,
        operation: str = "operation",
    ):
        """Initialize the lock.

        Args:
            key: Lock key
            timeout: Maximum time to wait for lock (None = wait forever)
            operation: Description of the operation for logging
        """
        self.key = key
        self.timeout = timeout
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None
        self._acquired = False

    async def __aenter__(self) -> "KeyedLock":
        """Acquire the lock."""
        self._lock = await get_lock(self.key)
        _users[self.key] = _users.get(self.key, 0) + 1

        try:
            if self.timeout:
                self._acquired = await asyncio.wait_for(
                    self._lock.acquire(),
                    timeout=self.timeout,
                )
            else:
                await self._lock.acquire()
                self._acquired = True

            logger.debug(f"Lock acquired for {self.key}: {self.operation}")
            return self

        except asyncio.TimeoutError:
            self._forget()
            logger.warning(f"Lock timeout for {self.key} after {self.timeout}s: {self.operation}")
            raise LockTimeoutError(
                f"Could not acquire lock for {self.key} within {self.timeout}s"
            )
        except asyncio.CancelledError:
            self._forget()
            raise

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Release the lock."""
        if self._acquired and self._lock:
            self._lock.release()
            self._acquired = False
            logger.debug(f"Lock released for {self.key}: {self.operation}")
        self._forget()
        return False

    def _forget(self) -> None:
        """Drop the registry entry once no KeyedLock holds or awaits the key."""
        remaining = _users.get(self.key, 0) - 1
        if remaining > 0:
            _users[self.key] = remaining
            return
        _users.pop(self.key, None)
        if _locks.get(self.key) is self._lock and not self._lock.locked():
            del _locks[self.key]


@asynccontextmanager
async def keyed_lock(
    key: str,
    timeout: Optional[float] = None,
    operation: str = "operation",
):
    """Functional form of KeyedLock.

    Example:
        async with keyed_lock(f"user:{user_id}:onramp", operation="bank_account"):
            ...
    """
    async with KeyedLock(key, timeout=timeout, operation=operation):
        yield


def clear_keyed_locks() -> None:
    """Clear all locks (useful for testing)."""
    _locks.clear()
    _users.clear()
