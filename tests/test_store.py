"""Tests for the user / wallet stores."""

import json

import httpx
import pytest

from remifi.exceptions import DuplicateResourceError
from remifi.store import MemoryUserStore, SupabaseUserStore, UserProfile
from remifi.wallets.base import Wallet

WALLET = Wallet(wallet_id="wallet-1", address="0x" + "12" * 20, network="ARC-TESTNET")


class TestUserProfile:
    """Tests for UserProfile."""

    def test_full_name(self):
        assert UserProfile(1, first_name="Alice", last_name="Smith").full_name == "Alice Smith"
        assert UserProfile(1, username="alice").full_name == "alice"
        assert UserProfile(7).full_name == "User 7"


class TestMemoryUserStore:
    """Tests for the in-memory store."""

    @pytest.mark.asyncio
    async def test_upsert_and_get(self):
        store = MemoryUserStore()

        await store.upsert_user(1, "alice", "Alice")
        await store.upsert_user(1, "alice2", "Alice", "Smith")

        user = await store.get_user(1)
        assert user.username == "alice2"
        assert user.last_name == "Smith"
        assert await store.get_user(2) is None

    @pytest.mark.asyncio
    async def test_upsert_keeps_provider_ids(self):
        store = MemoryUserStore()
        await store.upsert_user(1, "alice")
        await store.update_provider_ids(1, bank_account_id="bank-1")

        await store.upsert_user(1, "alice")

        assert (await store.get_user(1)).bank_account_id == "bank-1"

    @pytest.mark.asyncio
    async def test_wallet_per_network(self):
        store = MemoryUserStore()
        await store.save_wallet(1, WALLET)

        assert await store.get_wallet(1, "arc-testnet") == WALLET
        assert await store.get_wallet(1, "BASE-SEPOLIA") is None


class FakePostgrest:
    """Answers PostgREST calls for the users and wallets tables."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.users: list[dict] = []
        self.wallets: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        table = request.url.path.rsplit("/", 1)[-1]

        if request.method == "POST" and table == "users":
            row = {"circle_bank_account_id": None, "circle_recipient_address_id": None}
            row.update(json.loads(request.content))
            self.users = [row]
            return httpx.Response(201, json=[row])
        if request.method == "GET" and table == "users":
            return httpx.Response(200, json=self.users)
        if request.method == "PATCH" and table == "users":
            return httpx.Response(204)
        if request.method == "GET" and table == "wallets":
            return httpx.Response(200, json=self.wallets)
        if request.method == "POST" and table == "wallets":
            if self.wallets:
                return httpx.Response(
                    409,
                    json={"code": "23505", "message": "duplicate key value violates unique constraint"},
                )
            row = json.loads(request.content)
            self.wallets.append(row)
            return httpx.Response(201, json=[row])
        return httpx.Response(400, json={"message": "bad request"})


@pytest.fixture
def postgrest() -> FakePostgrest:
    return FakePostgrest()


@pytest.fixture
def supabase(postgrest) -> SupabaseUserStore:
    return SupabaseUserStore(
        "https://project.supabase.co",
        "service-key",
        transport=httpx.MockTransport(postgrest.handler),
    )


class TestSupabaseUserStore:
    """Tests for SupabaseUserStore against a fake PostgREST."""

    def test_requires_url_and_key(self):
        with pytest.raises(ValueError):
            SupabaseUserStore("", "key")

    @pytest.mark.asyncio
    async def test_upsert_user(self, postgrest, supabase):
        user = await supabase.upsert_user(42, "alice", "Alice", "Smith")

        assert user == UserProfile(42, "alice", "Alice", "Smith")
        request = postgrest.requests[0]
        assert request.url.path == "/rest/v1/users"
        assert request.url.params["on_conflict"] == "tg_id"
        assert "merge-duplicates" in request.headers["Prefer"]
        assert request.headers["apikey"] == "service-key"
        assert request.headers["Authorization"] == "Bearer service-key"

    @pytest.mark.asyncio
    async def test_get_missing_user(self, postgrest, supabase):
        assert await supabase.get_user(42) is None
        assert postgrest.requests[0].url.params["tg_id"] == "eq.42"

    @pytest.mark.asyncio
    async def test_get_user_with_provider_ids(self, postgrest, supabase):
        postgrest.users = [
            {
                "tg_id": 42,
                "tg_username": "alice",
                "first_name": "Alice",
                "last_name": None,
                "circle_bank_account_id": "bank-1",
                "circle_recipient_address_id": "recipient-1",
            }
        ]

        user = await supabase.get_user(42)

        assert user.bank_account_id == "bank-1"
        assert user.recipient_address_id == "recipient-1"

    @pytest.mark.asyncio
    async def test_save_and_get_wallet(self, postgrest, supabase):
        await supabase.save_wallet(42, WALLET)

        assert postgrest.wallets == [
            {
                "tg_id": 42,
                "walletid": "wallet-1",
                "walletaddress": WALLET.address,
                "network": "ARC-TESTNET",
            }
        ]
        assert await supabase.get_wallet(42, "arc-testnet") == WALLET
        assert postgrest.requests[-1].url.params["network"] == "eq.ARC-TESTNET"

    @pytest.mark.asyncio
    async def test_duplicate_wallet(self, supabase):
        await supabase.save_wallet(42, WALLET)

        with pytest.raises(DuplicateResourceError):
            await supabase.save_wallet(42, WALLET)

    @pytest.mark.asyncio
    async def test_update_provider_ids(self, postgrest, supabase):
        await supabase.update_provider_ids(42, recipient_address_id="recipient-1")

        request = postgrest.requests[0]
        assert request.method == "PATCH"
        assert request.url.params["tg_id"] == "eq.42"
        assert json.loads(request.content) == {"circle_recipient_address_id": "recipient-1"}

    @pytest.mark.asyncio
    async def test_update_with_nothing_is_noop(self, postgrest, supabase):
        await supabase.update_provider_ids(42)
        assert postgrest.requests == []
