"""Fiat deposit handler."""

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from remifi.bot.errors import describe_error
from remifi.bridge import CrossChainTransferOrchestrator
from remifi.bridge.encoding import parse_amount
from remifi.config import get_settings
from remifi.notifications import TelegramNotifier
from remifi.onramp import get_onramp_provider
from remifi.onramp.deposit import DepositOrchestrator
from remifi.services.wallets import get_or_create_wallet
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("deposit"))
async def cmd_deposit(message: Message, command: CommandObject) -> None:
    """Deposit dollars and move them to the main wallet: /deposit <amount>."""
    if not message.from_user:
        return

    if not command.args:
        await message.answer("How much would you like to deposit? Use: /deposit <amount>")
        return

    settings = get_settings()
    store = get_user_store()
    gateway = get_wallet_gateway()
    notifier = TelegramNotifier(message.bot)
    user_id = message.from_user.id

    try:
        amount = parse_amount(command.args.strip())

        user = await store.get_user(user_id)
        if user is None:
            user = await store.upsert_user(
                user_id=user_id,
                username=message.from_user.username,
                first_name=message.from_user.first_name,
                last_name=message.from_user.last_name,
            )

        destination_wallet = await get_or_create_wallet(
            store, gateway, user_id, settings.primary_network
        )
        source_wallet = await get_or_create_wallet(
            store, gateway, user_id, settings.deposit_network
        )

        deposits = DepositOrchestrator(
            onramp=get_onramp_provider(),
            store=store,
            notifier=notifier,
            settle_delay=settings.deposit_settle_delay,
            faucet_url=settings.faucet_url,
        )
        await deposits.deposit_and_bridge(
            user=user,
            amount=amount,
            source_wallet=source_wallet,
            destination_wallet=destination_wallet,
            transfer_orchestrator=CrossChainTransferOrchestrator.from_settings(
                gateway, notifier=notifier
            ),
            conversation_id=message.chat.id,
        )
    except Exception as e:
        transfer_state = getattr(e, "transfer_state", None)
        if transfer_state is not None:
            logger.error(f"Deposit bridge for {user_id} stopped: {transfer_state.to_dict()}")
        else:
            logger.error(f"Deposit for {user_id} failed: {e}")
        await message.answer(describe_error(e))
