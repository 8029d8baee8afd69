"""Custodial wallet gateways."""

from remifi.wallets.base import (
    Balance,
    FeeLevel,
    TransactionState,
    TransactionStatus,
    Wallet,
    WalletGateway,
)
from remifi.wallets.factory import get_wallet_gateway

__all__ = [
    "Balance",
    "FeeLevel",
    "TransactionState",
    "TransactionStatus",
    "Wallet",
    "WalletGateway",
    "get_wallet_gateway",
]
