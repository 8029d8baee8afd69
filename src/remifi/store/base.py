"""User and wallet store interface.

Profiles and wallets live in an external data store. The core only needs
to read them and to write back the two on-ramp provider ids.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from remifi.wallets.base import Wallet


@dataclass
class UserProfile:
    """Chat user profile."""

    user_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bank_account_id: Optional[str] = None
    recipient_address_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.username or f"User {self.user_id}"


class UserStore(ABC):
    """Abstract base class for the user / wallet store."""

    @abstractmethod
    async def upsert_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserProfile:
        """Create the profile or refresh its names."""
        raise NotImplementedError()

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserProfile]:
        """Get a profile by chat user id."""
        raise NotImplementedError()

    @abstractmethod
    async def get_wallet(self, user_id: int, network: str) -> Optional[Wallet]:
        """Get the user's wallet on a network (at most one per network)."""
        raise NotImplementedError()

    @abstractmethod
    async def save_wallet(self, user_id: int, wallet: Wallet) -> Wallet:
        """Record a newly created wallet."""
        raise NotImplementedError()

    @abstractmethod
    async def update_provider_ids(
        self,
        user_id: int,
        bank_account_id: Optional[str] = None,
        recipient_address_id: Optional[str] = None,
    ) -> None:
        """Persist on-ramp provider ids onto the profile (None = leave as is)."""
        raise NotImplementedError()


class MemoryUserStore(UserStore):
    """Process-local store used in dry-run mode."""

    def __init__(self):
        self.users: dict[int, UserProfile] = {}
        self.wallets: dict[tuple[int, str], Wallet] = {}

    async def upsert_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserProfile:
        user = self.users.get(user_id)
        if user is None:
            user = UserProfile(user_id=user_id)
            self.users[user_id] = user
        user.username = username
        user.first_name = first_name
        user.last_name = last_name
        return user

    async def get_user(self, user_id: int) -> Optional[UserProfile]:
        return self.users.get(user_id)

    async def get_wallet(self, user_id: int, network: str) -> Optional[Wallet]:
        return self.wallets.get((user_id, network.upper()))

    async def save_wallet(self, user_id: int, wallet: Wallet) -> Wallet:
        self.wallets[(user_id, wallet.network.upper())] = wallet
        return wallet

    async def update_provider_ids(
        self,
        user_id: int,
        bank_account_id: Optional[str] = None,
        recipient_address_id: Optional[str] = None,
    ) -> None:
        user = self.users.get(user_id)
        if user is None:
            return
        if bank_account_id:
            user.bank_account_id = bank_account_id
        if recipient_address_id:
            user.recipient_address_id = recipient_address_id
