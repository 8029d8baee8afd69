"""Lazy per-network wallet provisioning.

A user has at most one custodial wallet per network. It is created on first
use and recorded in the user store.
"""

import logging

from remifi.exceptions import DuplicateResourceError
from remifi.store.base import UserStore
from remifi.utils.locks import keyed_lock
from remifi.wallets.base import Wallet, WalletGateway

logger = logging.getLogger(__name__)


async def get_or_create_wallet(
    store: UserStore,
    gateway: WalletGateway,
    user_id: int,
    network: str,
) -> Wallet:
    """Get the user's wallet on a network, creating it if missing."""
    network = network.upper()

    wallet = await store.get_wallet(user_id, network)
    if wallet:
        return wallet

    async with keyed_lock(f"user:{user_id}:wallet:{network}", operation="create_wallet"):
        # Double-check after acquiring lock
        wallet = await store.get_wallet(user_id, network)
        if wallet:
            return wallet

        wallet = await gateway.create_wallet(network)
        try:
            await store.save_wallet(user_id, wallet)
        except DuplicateResourceError:
            existing = await store.get_wallet(user_id, network)
            if existing is None:
                raise
            logger.warning(
                f"Wallet for user {user_id} on {network} created concurrently, "
                f"keeping {existing.wallet_id}"
            )
            return existing

    logger.info(f"Created {network} wallet {wallet.wallet_id} for user {user_id}")
    return wallet
