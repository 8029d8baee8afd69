"""Circle Business Account on-ramp (sandbox).

Uses the Business Account API, not W3S: wires land as USD balance in the
Circle business account and transfers pay USDC out to verified addresses.

Docs: https://developers.circle.com/circle-mint/reference
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional

import httpx

from remifi.onramp.base import (
    MOCK_ACCOUNT_NUMBER,
    MOCK_ROUTING_NUMBER,
    BillingDetails,
    OnRampProvider,
    WireInstructions,
)

logger = logging.getLogger(__name__)

# W3S network id -> Business API chain code
BUSINESS_CHAIN_CODES = {
    "ETH-SEPOLIA": "ETH",
    "AVAX-FUJI": "AVAX",
    "BASE-SEPOLIA": "BASE",
    "ARB-SEPOLIA": "ARB",
    "OP-SEPOLIA": "OP",
    "MATIC-AMOY": "MATIC",
}


def business_chain_code(network: str) -> str:
    """Map a network id to the chain code the Business API expects."""
    network = network.upper()
    return BUSINESS_CHAIN_CODES.get(network, network.split("-")[0])


class CircleBusinessProvider(OnRampProvider):
    """On-ramp backed by the Circle Business Account sandbox."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api-sandbox.circle.com/v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Initialize provider.

        Args:
            api_key: Circle sandbox API key
            base_url: Business Account API base URL
            transport: Optional httpx transport (tests)
            timeout: Per-request timeout in seconds
        """
        if not api_key:
            raise ValueError("Circle sandbox API key is missing")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "circle_business"

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, json=json)
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json().get("data", {})

    async def create_bank_account(
        self,
        billing: BillingDetails,
        account_number: str = MOCK_ACCOUNT_NUMBER,
        routing_number: str = MOCK_ROUTING_NUMBER,
    ) -> str:
        data = await self._request(
            "POST",
            "/businessAccount/banks/wires",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "accountNumber": account_number,
                "routingNumber": routing_number,
                "billingDetails": {
                    "name": billing.name,
                    "city": billing.city,
                    "country": billing.country,
                    "line1": billing.line1,
                    "district": billing.district,
                    "postalCode": billing.postal_code,
                },
                "bankAddress": {
                    "country": "US",
                    "district": "CA",
                },
            },
        )
        logger.info(f"Created wire bank account {data['id']}")
        return data["id"]

    async def get_wire_instructions(self, bank_account_id: str) -> WireInstructions:
        data = await self._request(
            "GET", f"/businessAccount/banks/wires/{bank_account_id}/instructions"
        )
        beneficiary_bank = data.get("beneficiaryBank", {})
        return WireInstructions(
            beneficiary_name=data.get("beneficiary", {}).get("name", ""),
            bank_name=beneficiary_bank.get("name", ""),
            account_number=beneficiary_bank["accountNumber"],
            routing_number=beneficiary_bank.get("routingNumber", ""),
        )

    async def submit_mock_wire(self, amount: Decimal, beneficiary_account_number: str) -> None:
        await self._request(
            "POST",
            "/mocks/payments/wire",
            json={
                "amount": {"amount": str(amount), "currency": "USD"},
                "beneficiaryBank": {"accountNumber": beneficiary_account_number},
            },
        )
        logger.info(f"Mock wire of {amount} USD submitted")

    async def create_recipient_address(self, chain: str, address: str, description: str = "") -> str:
        data = await self._request(
            "POST",
            "/businessAccount/wallets/addresses/recipient",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "chain": business_chain_code(chain),
                "address": address,
                "currency": "USD",
                "description": description,
            },
        )
        logger.info(f"Created recipient address {data['id']} for {address}")
        return data["id"]

    async def submit_transfer(self, recipient_address_id: str, amount: Decimal) -> str:
        data = await self._request(
            "POST",
            "/businessAccount/transfers",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "destination": {
                    "type": "verified_blockchain",
                    "addressId": recipient_address_id,
                },
                "amount": {"currency": "USD", "amount": str(amount)},
            },
        )
        logger.info(f"Payout transfer {data.get('id')} to {recipient_address_id} submitted")
        return data.get("id", "")
