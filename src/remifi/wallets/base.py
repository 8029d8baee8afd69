"""Wallet gateway base interface.

The gateway fronts a custodial wallet provider. Keys never leave the
provider; this side only submits transactions and reads their status.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class TransactionState(str, Enum):
    """Normalized transaction state."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class FeeLevel(str, Enum):
    """Provider fee tier."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class Wallet:
    """Custodial account on one network."""

    wallet_id: str
    address: str
    network: str


@dataclass
class Balance:
    """USDC balance of a wallet."""

    amount: Decimal
    network: str


@dataclass
class TransactionStatus:
    """Status of a submitted transaction."""

    tx_id: str
    state: TransactionState
    tx_hash: Optional[str] = None
    raw_state: Optional[str] = None  # Provider's own state name
    error: Optional[str] = None


class WalletGateway(ABC):
    """Abstract base class for custodial wallet providers."""

    @abstractmethod
    async def create_wallet(self, network: str) -> Wallet:
        """Create a wallet on a network.

        Args:
            network: Network identifier (e.g. BASE-SEPOLIA)

        Returns:
            The new wallet
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_balance(self, wallet_id: str, network: str) -> Balance:
        """Get the USDC balance of a wallet."""
        raise NotImplementedError()

    @abstractmethod
    async def send_transfer(
        self,
        wallet_id: str,
        network: str,
        destination_address: str,
        amount: Decimal,
        fee_level: FeeLevel = FeeLevel.LOW,
    ) -> str:
        """Submit a direct USDC transfer.

        Returns:
            Provider transaction id
        """
        raise NotImplementedError()

    @abstractmethod
    async def submit_contract_call(
        self,
        wallet_id: str,
        contract_address: str,
        function_signature: str,
        parameters: list[Any],
        fee_level: FeeLevel = FeeLevel.MEDIUM,
    ) -> str:
        """Submit a contract execution transaction.

        Args:
            wallet_id: Wallet that signs the transaction
            contract_address: Target contract
            function_signature: ABI signature, e.g. ``approve(address,uint256)``
            parameters: ABI parameters in order
            fee_level: Provider fee tier

        Returns:
            Provider transaction id
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_transaction_status(self, tx_id: str) -> TransactionStatus:
        """Get the current status of a transaction."""
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway name."""
        raise NotImplementedError()
