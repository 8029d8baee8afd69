"""Deposit-and-bridge pipeline.

A user deposit goes fiat -> USDC on the deposit network (via the on-ramp
provider) -> USDC on the user's main network (via CCTP):

1. resolve the user's wire bank account (created once, then reused)
2. fetch wire instructions and show them to the user
3. submit a mock wire (sandbox)
4. resolve the payout recipient address (created once, then reused)
5. pay out USDC to the source wallet on the deposit network
6. bridge from the source wallet to the destination wallet
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import httpx

from remifi.bridge.encoding import parse_amount
from remifi.bridge.transfer import BridgeTransactionRecord, CrossChainTransferOrchestrator
from remifi.exceptions import ProviderDegradedError
from remifi.notifications.base import ConversationId, ProgressNotifier, notify_safely
from remifi.onramp.base import BillingDetails, OnRampProvider, WireInstructions
from remifi.store.base import UserProfile, UserStore
from remifi.utils.locks import keyed_lock
from remifi.wallets.base import Wallet

logger = logging.getLogger(__name__)

DEFAULT_FAUCET_URL = "https://faucet.circle.com"


def format_usd(amount: Decimal) -> str:
    """Format an amount for chat messages, e.g. 25 -> "25.00"."""
    return f"{amount:,.2f}" if amount == amount.quantize(Decimal("0.01")) else f"{amount:,f}"


@dataclass
class DepositFlowContext:
    """Everything one deposit request has resolved so far."""

    user: UserProfile
    amount: Decimal
    source_wallet: Wallet
    destination_wallet: Wallet
    bank_account_id: Optional[str] = None
    beneficiary: Optional[WireInstructions] = None
    recipient_address_id: Optional[str] = None
    provider_transfer_id: Optional[str] = None


class DepositOrchestrator:
    """Runs the mocked fiat on-ramp and hands off to the bridge."""

    def __init__(
        self,
        onramp: OnRampProvider,
        store: UserStore,
        notifier: Optional[ProgressNotifier] = None,
        settle_delay: float = 5.0,
        faucet_url: str = DEFAULT_FAUCET_URL,
    ):
        self.onramp = onramp
        self.store = store
        self.notifier = notifier
        self.settle_delay = settle_delay
        self.faucet_url = faucet_url

    async def deposit_and_bridge(
        self,
        user: UserProfile,
        amount,
        source_wallet: Wallet,
        destination_wallet: Wallet,
        transfer_orchestrator: CrossChainTransferOrchestrator,
        conversation_id: Optional[ConversationId] = None,
    ) -> BridgeTransactionRecord:
        """Deposit fiat and move the resulting USDC to the destination wallet.

        Args:
            user: Profile of the depositing user (provider ids updated in place)
            amount: USD amount to deposit
            source_wallet: Wallet the on-ramp pays out to (deposit network)
            destination_wallet: User's main wallet
            transfer_orchestrator: Bridge used for the final hop
            conversation_id: Chat to report progress to

        Returns:
            Transaction ids of the bridge

        Raises:
            InvalidAmountError: If the amount is not a positive USDC amount
            ProviderDegradedError: If the provider payout is rejected
            BridgeError: If the bridge fails (see CrossChainTransferOrchestrator)
        """
        ctx = DepositFlowContext(
            user=user,
            amount=parse_amount(amount),
            source_wallet=source_wallet,
            destination_wallet=destination_wallet,
        )
        display = format_usd(ctx.amount)
        logger.info(f"Deposit of {ctx.amount} USD started for user {user.user_id}")

        await self._notify(conversation_id, "Okay, I'm connecting to the bank now... 🏦")

        # Steps 1-2: bank account and wire instructions
        ctx.bank_account_id = await self.find_or_create_bank_account(user)
        ctx.beneficiary = await self.onramp.get_wire_instructions(ctx.bank_account_id)
        await self._notify(
            conversation_id,
            "To deposit, you would send a wire to:\n"
            f"Name: {ctx.beneficiary.beneficiary_name}\n"
            f"Bank: {ctx.beneficiary.bank_name}\n"
            f"Account #: {ctx.beneficiary.account_number}\n"
            f"Routing #: {ctx.beneficiary.routing_number}\n\n"
            "But for testing purposes we are going to mock the transfer.",
        )

        # Step 3: mock wire
        await self._notify(conversation_id, "Submitting your deposit request now!")
        await self.onramp.submit_mock_wire(ctx.amount, ctx.beneficiary.account_number)

        # Step 4: payout recipient
        ctx.recipient_address_id = await self.find_or_create_recipient_address(
            user, source_wallet
        )

        # Step 5: payout to the source wallet
        try:
            ctx.provider_transfer_id = await self.onramp.submit_transfer(
                ctx.recipient_address_id, ctx.amount
            )
        except httpx.HTTPError as e:
            logger.error(f"Provider payout failed for user {user.user_id}: {e}")
            raise ProviderDegradedError(
                self.faucet_url, destination_wallet.address, reason=_error_reason(e)
            ) from e

        await self._notify(
            conversation_id,
            "Your deposit is being processed by the bank. "
            "I'll let you know as soon as it arrives.",
        )

        # Step 6: bridge to the main wallet
        if self.settle_delay:
            await asyncio.sleep(self.settle_delay)

        await self._notify(conversation_id, f"Awesome, your ${display} have arrived!!")
        await self._notify(
            conversation_id,
            f"Now, I'm moving them to your main account on "
            f"{destination_wallet.network} (from {source_wallet.network}). "
            "This uses a bridge, so it takes a minute... 🌉",
        )

        record = await transfer_orchestrator.transfer(
            source_wallet_id=source_wallet.wallet_id,
            source_network=source_wallet.network,
            destination_network=destination_wallet.network,
            destination_address=destination_wallet.address,
            destination_wallet_id=destination_wallet.wallet_id,
            amount=ctx.amount,
            conversation_id=conversation_id,
        )

        await self._notify(
            conversation_id,
            f"All done! Your ${display} are now safely in your main account. ✨",
        )
        logger.info(
            f"Deposit for user {user.user_id} complete "
            f"(payout {ctx.provider_transfer_id}, mint {record.receive_tx_id})"
        )
        return record

    async def find_or_create_bank_account(self, user: UserProfile) -> str:
        """Return the user's wire bank account id, creating it on first use."""
        if user.bank_account_id:
            return user.bank_account_id

        async with keyed_lock(f"user:{user.user_id}:onramp", operation="bank_account"):
            stored = await self.store.get_user(user.user_id)
            if stored and stored.bank_account_id:
                user.bank_account_id = stored.bank_account_id
                return user.bank_account_id

            bank_account_id = await self.onramp.create_bank_account(
                BillingDetails(name=user.full_name)
            )
            await self.store.update_provider_ids(user.user_id, bank_account_id=bank_account_id)
            user.bank_account_id = bank_account_id
            logger.info(f"Bank account {bank_account_id} created for user {user.user_id}")
            return bank_account_id

    async def find_or_create_recipient_address(self, user: UserProfile, wallet: Wallet) -> str:
        """Return the user's approved payout address id, registering it on first use."""
        if user.recipient_address_id:
            return user.recipient_address_id

        async with keyed_lock(f"user:{user.user_id}:onramp", operation="recipient_address"):
            stored = await self.store.get_user(user.user_id)
            if stored and stored.recipient_address_id:
                user.recipient_address_id = stored.recipient_address_id
                return user.recipient_address_id

            recipient_id = await self.onramp.create_recipient_address(
                wallet.network,
                wallet.address,
                description=f"{user.full_name} deposit wallet",
            )
            await self.store.update_provider_ids(
                user.user_id, recipient_address_id=recipient_id
            )
            user.recipient_address_id = recipient_id
            logger.info(f"Recipient address {recipient_id} created for user {user.user_id}")
            return recipient_id

    async def _notify(self, conversation_id: Optional[ConversationId], text: str) -> None:
        await notify_safely(self.notifier, conversation_id, text)


def _error_reason(error: httpx.HTTPError) -> str:
    """Short reason from a provider error response, if it has one."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            message = error.response.json().get("message")
        except ValueError:
            message = None
        return message or f"HTTP {error.response.status_code}"
    return type(error).__name__
