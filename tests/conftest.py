"""Pytest configuration and fixtures."""

import os
from decimal import Decimal

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["DEBUG"] = "true"
os.environ["DRY_RUN"] = "true"
os.environ["CIRCLE_API_KEY"] = ""
os.environ["CIRCLE_ENTITY_SECRET"] = ""
os.environ["CIRCLE_SANDBOX_API_KEY"] = ""
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_KEY"] = ""

from remifi.config import reset_settings
from remifi.notifications import ProgressNotifier, reset_notifier
from remifi.onramp import reset_onramp_provider
from remifi.store import MemoryUserStore, UserProfile, reset_user_store
from remifi.utils.locks import clear_keyed_locks
from remifi.wallets.base import FeeLevel, TransactionState, TransactionStatus, Wallet
from remifi.wallets.dryrun import DryRunWalletGateway
from remifi.wallets.factory import reset_wallet_gateway



class RecordingNotifier(ProgressNotifier):
    """Notifier that keeps every message it was asked to send."""

    def __init__(self):
        self.messages: list[tuple[object, str]] = []

    async def notify(self, conversation_id, text: str) -> bool:
        self.messages.append((conversation_id, text))
        return True

    @property
    def texts(self) -> list[str]:
        return [text for _, text in self.messages]


class ScriptedGateway(DryRunWalletGateway):
    """Dry-run gateway whose transactions can be made to fail or hang.

    Behaviour is decided per ABI signature at submission time, so a failed
    transaction stays failed even after the script changes.
    """

    def __init__(self):
        super().__init__(starting_balance=Decimal("100"))
        self.fail_signatures: set[str] = set()
        self.pending_signatures: set[str] = set()
        self.no_hash_signatures: set[str] = set()
        self._behaviour: dict[str, str] = {}
        self.status_checks = 0

    async def submit_contract_call(
        self, wallet_id, contract_address, function_signature, parameters, fee_level=FeeLevel.MEDIUM
    ):
        tx_id = await super().submit_contract_call(
            wallet_id, contract_address, function_signature, parameters, fee_level
        )
        self.transactions[tx_id]["fee_level"] = fee_level
        if function_signature in self.fail_signatures:
            self._behaviour[tx_id] = "failed"
        elif function_signature in self.pending_signatures:
            self._behaviour[tx_id] = "pending"
        elif function_signature in self.no_hash_signatures:
            self._behaviour[tx_id] = "no_hash"
        return tx_id

    async def get_transaction_status(self, tx_id: str) -> TransactionStatus:
        self.status_checks += 1
        behaviour = self._behaviour.get(tx_id)
        if behaviour == "failed":
            return TransactionStatus(
                tx_id=tx_id, state=TransactionState.FAILED, raw_state="FAILED", error="reverted"
            )
        if behaviour == "pending":
            return TransactionStatus(tx_id=tx_id, state=TransactionState.PENDING, raw_state="SENT")
        if behaviour == "no_hash":
            return TransactionStatus(tx_id=tx_id, state=TransactionState.CONFIRMED)
        return await super().get_transaction_status(tx_id)

    def calls(self, signature: str) -> list[dict]:
        return [
            tx for tx in self.transactions.values() if tx.get("function_signature") == signature
        ]


@pytest.fixture(autouse=True)
def reset_singletons():
    """Fresh settings, factories and locks for every test."""
    reset_settings()
    reset_wallet_gateway()
    reset_onramp_provider()
    reset_user_store()
    reset_notifier()
    clear_keyed_locks()
    yield
    reset_settings()
    clear_keyed_locks()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def store() -> MemoryUserStore:
    return MemoryUserStore()


@pytest.fixture
def user() -> UserProfile:
    return UserProfile(user_id=42, username="alice", first_name="Alice", last_name="Smith")


@pytest.fixture
def source_wallet() -> Wallet:
    return Wallet(wallet_id="wallet-base", address="0x" + "11" * 20, network="BASE-SEPOLIA")


@pytest.fixture
def destination_wallet() -> Wallet:
    return Wallet(wallet_id="wallet-arc", address="0x" + "22" * 20, network="ARC-TESTNET")
