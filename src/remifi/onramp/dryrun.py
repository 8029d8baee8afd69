"""Dry-run on-ramp provider for testing (no real bank or payout calls)."""

from decimal import Decimal

from remifi.onramp.base import (
    MOCK_ACCOUNT_NUMBER,
    MOCK_ROUTING_NUMBER,
    BillingDetails,
    OnRampProvider,
    WireInstructions,
)


class DryRunOnRampProvider(OnRampProvider):
    """Simulated on-ramp that records wires and payouts in memory."""

    def __init__(self):
        self.bank_accounts: dict[str, BillingDetails] = {}
        self.recipients: dict[str, tuple[str, str]] = {}
        self.wires: list[tuple[Decimal, str]] = []
        self.transfers: list[tuple[str, Decimal]] = []

    @property
    def name(self) -> str:
        return "dryrun"

    async def create_bank_account(
        self,
        billing: BillingDetails,
        account_number: str = MOCK_ACCOUNT_NUMBER,
        routing_number: str = MOCK_ROUTING_NUMBER,
    ) -> str:
        bank_account_id = f"sim-bank-{len(self.bank_accounts) + 1:04d}"
        self.bank_accounts[bank_account_id] = billing
        return bank_account_id

    async def get_wire_instructions(self, bank_account_id: str) -> WireInstructions:
        return WireInstructions(
            beneficiary_name="RemiFi Sandbox",
            bank_name="SIMULATED BANK",
            account_number=f"SIM{bank_account_id[-4:]}",
            routing_number=MOCK_ROUTING_NUMBER,
        )

    async def submit_mock_wire(self, amount: Decimal, beneficiary_account_number: str) -> None:
        self.wires.append((amount, beneficiary_account_number))

    async def create_recipient_address(self, chain: str, address: str, description: str = "") -> str:
        recipient_id = f"sim-recipient-{len(self.recipients) + 1:04d}"
        self.recipients[recipient_id] = (chain, address)
        return recipient_id

    async def submit_transfer(self, recipient_address_id: str, amount: Decimal) -> str:
        self.transfers.append((recipient_address_id, amount))
        return f"sim-transfer-{len(self.transfers):04d}"
