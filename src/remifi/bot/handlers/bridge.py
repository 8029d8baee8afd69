"""Cross-chain transfer handler."""

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from remifi.bot.errors import describe_error
from remifi.bridge import CrossChainTransferOrchestrator
from remifi.config import get_settings
from remifi.notifications import TelegramNotifier
from remifi.services.wallets import get_or_create_wallet
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway

logger = logging.getLogger(__name__)

router = Router()

USAGE = "Invalid format. Use: /bridge <destination-network> <address> <amount>"


@router.message(Command("bridge", "cctp"))
async def cmd_bridge(message: Message, command: CommandObject) -> None:
    """Bridge USDC from the main wallet: /bridge <network> <address> <amount>."""
    if not message.from_user:
        return

    params = (command.args or "").split()
    if len(params) != 3:
        await message.answer(USAGE)
        return
    destination_network, destination_address, amount = params
    destination_network = destination_network.upper()

    settings = get_settings()
    store = get_user_store()
    gateway = get_wallet_gateway()
    user_id = message.from_user.id

    source_wallet = await store.get_wallet(user_id, settings.primary_network)
    if not source_wallet:
        await message.answer(
            f"No wallet found for {settings.primary_network}. Say /start to create one."
        )
        return

    orchestrator = CrossChainTransferOrchestrator.from_settings(
        gateway, notifier=TelegramNotifier(message.bot)
    )

    try:
        state = orchestrator.prepare(
            source_wallet.wallet_id,
            source_wallet.network,
            destination_network,
            destination_address,
            destination_wallet_id="",
            amount=amount,
        )
        # Receive is submitted from the user's own wallet on the destination chain
        destination_wallet = await get_or_create_wallet(
            store, gateway, user_id, destination_network
        )
        await message.answer("Initiating cross-chain transfer...")
        record = await orchestrator.transfer(
            source_wallet_id=source_wallet.wallet_id,
            source_network=source_wallet.network,
            destination_network=destination_network,
            destination_address=state.request.destination_address,
            destination_wallet_id=destination_wallet.wallet_id,
            amount=state.request.amount,
            conversation_id=message.chat.id,
        )
    except Exception as e:
        transfer_state = getattr(e, "transfer_state", None)
        if transfer_state is not None:
            logger.error(f"Bridge for {user_id} stopped: {transfer_state.to_dict()}")
        else:
            logger.error(f"Bridge for {user_id} failed: {e}")
        await message.answer(describe_error(e))
        return

    await message.answer(
        "✅ Cross-chain transfer complete!\n\n"
        f"From: {source_wallet.network}\n"
        f"To: {destination_network}\n"
        f"Amount: {state.request.amount} USDC\n"
        f"Recipient: {state.request.destination_address}\n\n"
        "Transactions:\n"
        f"Approve: {record.approve_tx_id}\n"
        f"Burn: {record.burn_tx_id}\n"
        f"Receive: {record.receive_tx_id}"
    )
