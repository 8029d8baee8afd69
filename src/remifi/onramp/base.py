"""Fiat on-ramp provider base interface.

The on-ramp turns a fiat wire into provider-custodied USDC and pays it out
to a pre-approved blockchain address.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

# Mock bank account from the Circle sandbox docs
MOCK_ACCOUNT_NUMBER = "12340010"
MOCK_ROUTING_NUMBER = "121000248"


@dataclass
class BillingDetails:
    """Billing details attached to a wire bank account."""

    name: str
    city: str = "Boston"
    country: str = "US"
    line1: str = "100 Money Street"
    district: str = "MA"
    postal_code: str = "01234"


@dataclass
class WireInstructions:
    """Where a real wire would have to be sent."""

    beneficiary_name: str
    bank_name: str
    account_number: str
    routing_number: str


class OnRampProvider(ABC):
    """Abstract base class for fiat on-ramp providers."""

    @abstractmethod
    async def create_bank_account(
        self,
        billing: BillingDetails,
        account_number: str = MOCK_ACCOUNT_NUMBER,
        routing_number: str = MOCK_ROUTING_NUMBER,
    ) -> str:
        """Register a wire bank account.

        Returns:
            Provider bank account id
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_wire_instructions(self, bank_account_id: str) -> WireInstructions:
        """Get wire instructions for a bank account."""
        raise NotImplementedError()

    @abstractmethod
    async def submit_mock_wire(self, amount: Decimal, beneficiary_account_number: str) -> None:
        """Simulate an incoming wire (sandbox only)."""
        raise NotImplementedError()

    @abstractmethod
    async def create_recipient_address(self, chain: str, address: str, description: str = "") -> str:
        """Register an approved payout address.

        Returns:
            Provider recipient address id
        """
        raise NotImplementedError()

    @abstractmethod
    async def submit_transfer(self, recipient_address_id: str, amount: Decimal) -> str:
        """Pay out USDC from the provider balance to an approved address.

        Returns:
            Provider transfer id
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        raise NotImplementedError()
