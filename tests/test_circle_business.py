"""Tests for the Circle Business Account on-ramp."""

import json
from decimal import Decimal

import httpx
import pytest

from remifi.onramp.base import BillingDetails
from remifi.onramp.circle_business import CircleBusinessProvider, business_chain_code


class FakeBusinessApi:
    """Records requests and answers like the Business Account sandbox."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1")

        if path == "/businessAccount/banks/wires":
            return httpx.Response(201, json={"data": {"id": "bank-1"}})
        if path == "/businessAccount/banks/wires/bank-1/instructions":
            return httpx.Response(
                200,
                json={
                    "data": {
                        "trackingRef": "CIR13FB13A",
                        "beneficiary": {"name": "CIRCLE INTERNET FINANCIAL INC"},
                        "beneficiaryBank": {
                            "name": "CRYPTO BANK",
                            "accountNumber": "1000000001",
                            "routingNumber": "999999999",
                        },
                    }
                },
            )
        if path == "/mocks/payments/wire":
            return httpx.Response(200, json={"data": {"trackingRef": "CIR13FB13A"}})
        if path == "/businessAccount/wallets/addresses/recipient":
            return httpx.Response(201, json={"data": {"id": "recipient-1"}})
        if path == "/businessAccount/transfers":
            return httpx.Response(201, json={"data": {"id": "transfer-1", "status": "pending"}})
        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def api() -> FakeBusinessApi:
    return FakeBusinessApi()


@pytest.fixture
def provider(api) -> CircleBusinessProvider:
    return CircleBusinessProvider(
        api_key="SAND_API_KEY:abc", transport=httpx.MockTransport(api.handler)
    )


class TestCircleBusinessProvider:
    """Tests for CircleBusinessProvider."""

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            CircleBusinessProvider(api_key="")

    def test_chain_codes(self):
        assert business_chain_code("BASE-SEPOLIA") == "BASE"
        assert business_chain_code("eth-sepolia") == "ETH"
        assert business_chain_code("ARC-TESTNET") == "ARC"

    @pytest.mark.asyncio
    async def test_create_bank_account(self, api, provider):
        bank_account_id = await provider.create_bank_account(BillingDetails(name="Alice Smith"))

        assert bank_account_id == "bank-1"
        body = api.last_body()
        assert body["accountNumber"] == "12340010"
        assert body["routingNumber"] == "121000248"
        assert body["billingDetails"] == {
            "name": "Alice Smith",
            "city": "Boston",
            "country": "US",
            "line1": "100 Money Street",
            "district": "MA",
            "postalCode": "01234",
        }
        assert body["bankAddress"] == {"country": "US", "district": "CA"}
        assert body["idempotencyKey"]
        assert api.requests[-1].headers["Authorization"] == "Bearer SAND_API_KEY:abc"

    @pytest.mark.asyncio
    async def test_wire_instructions(self, provider):
        instructions = await provider.get_wire_instructions("bank-1")

        assert instructions.beneficiary_name == "CIRCLE INTERNET FINANCIAL INC"
        assert instructions.bank_name == "CRYPTO BANK"
        assert instructions.account_number == "1000000001"
        assert instructions.routing_number == "999999999"

    @pytest.mark.asyncio
    async def test_mock_wire(self, api, provider):
        await provider.submit_mock_wire(Decimal("25.00"), "1000000001")

        assert api.last_body() == {
            "amount": {"amount": "25.00", "currency": "USD"},
            "beneficiaryBank": {"accountNumber": "1000000001"},
        }

    @pytest.mark.asyncio
    async def test_recipient_address(self, api, provider):
        recipient_id = await provider.create_recipient_address(
            "BASE-SEPOLIA", "0x" + "11" * 20, description="Alice deposit wallet"
        )

        assert recipient_id == "recipient-1"
        body = api.last_body()
        assert body["chain"] == "BASE"
        assert body["address"] == "0x" + "11" * 20
        assert body["currency"] == "USD"
        assert body["description"] == "Alice deposit wallet"

    @pytest.mark.asyncio
    async def test_payout_transfer(self, api, provider):
        transfer_id = await provider.submit_transfer("recipient-1", Decimal("25.00"))

        assert transfer_id == "transfer-1"
        body = api.last_body()
        assert body["destination"] == {"type": "verified_blockchain", "addressId": "recipient-1"}
        assert body["amount"] == {"currency": "USD", "amount": "25.00"}

    @pytest.mark.asyncio
    async def test_idempotency_keys_are_unique(self, api, provider):
        await provider.submit_transfer("recipient-1", Decimal("1"))
        first = api.last_body()["idempotencyKey"]
        await provider.submit_transfer("recipient-1", Decimal("1"))

        assert api.last_body()["idempotencyKey"] != first

    @pytest.mark.asyncio
    async def test_errors_propagate(self, provider):
        with pytest.raises(httpx.HTTPStatusError):
            await provider.get_wire_instructions("missing")
