"""Dry-run wallet gateway for testing (no real transactions)."""

import hashlib
from decimal import Decimal
from typing import Any

from remifi.wallets.base import (
    Balance,
    FeeLevel,
    TransactionState,
    TransactionStatus,
    Wallet,
    WalletGateway,
)


def _fake_hex(seed: str, length: int) -> str:
    return hashlib.sha256(seed.encode()).hexdigest()[:length]


class DryRunWalletGateway(WalletGateway):
    """Simulated gateway with deterministic ids; every transaction confirms."""

    def __init__(self, starting_balance: Decimal = Decimal("0")):
        self.starting_balance = starting_balance
        self.wallets: dict[str, Wallet] = {}
        self.transactions: dict[str, dict[str, Any]] = {}

    @property
    def name(self) -> str:
        return "dryrun"

    def _record(self, kind: str, wallet_id: str, **details: Any) -> str:
        tx_id = f"sim-tx-{len(self.transactions) + 1:04d}"
        self.transactions[tx_id] = {"kind": kind, "wallet_id": wallet_id, **details}
        return tx_id

    async def create_wallet(self, network: str) -> Wallet:
        index = len(self.wallets) + 1
        wallet = Wallet(
            wallet_id=f"sim-wallet-{index:04d}",
            address=f"0x{_fake_hex(f'{network}:{index}', 40)}",
            network=network.upper(),
        )
        self.wallets[wallet.wallet_id] = wallet
        return wallet

    async def get_balance(self, wallet_id: str, network: str) -> Balance:
        return Balance(amount=self.starting_balance, network=network)

    async def send_transfer(
        self,
        wallet_id: str,
        network: str,
        destination_address: str,
        amount: Decimal,
        fee_level: FeeLevel = FeeLevel.LOW,
    ) -> str:
        return self._record(
            "transfer",
            wallet_id,
            network=network,
            destination_address=destination_address,
            amount=str(amount),
        )

    async def submit_contract_call(
        self,
        wallet_id: str,
        contract_address: str,
        function_signature: str,
        parameters: list[Any],
        fee_level: FeeLevel = FeeLevel.MEDIUM,
    ) -> str:
        return self._record(
            "contract_call",
            wallet_id,
            contract_address=contract_address,
            function_signature=function_signature,
            parameters=list(parameters),
        )

    async def get_transaction_status(self, tx_id: str) -> TransactionStatus:
        if tx_id not in self.transactions:
            return TransactionStatus(tx_id=tx_id, state=TransactionState.FAILED, error="unknown tx")
        return TransactionStatus(
            tx_id=tx_id,
            state=TransactionState.CONFIRMED,
            tx_hash=f"0x{_fake_hex(tx_id, 64)}",
            raw_state="CONFIRMED",
        )
