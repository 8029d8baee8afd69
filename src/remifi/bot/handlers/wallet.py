"""Wallet address and balance handlers."""

import logging

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from remifi.bot.errors import describe_error
from remifi.config import get_settings
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("address"))
async def cmd_address(message: Message) -> None:
    """Show the user's main wallet address."""
    if not message.from_user:
        return

    network = get_settings().primary_network
    wallet = await get_user_store().get_wallet(message.from_user.id, network)
    if not wallet:
        await message.answer(f"No wallet found for {network}. Say /start to create one.")
        return

    await message.answer(f"Your wallet address on {network} is: {wallet.address}")


@router.message(Command("balance"))
async def cmd_balance(message: Message) -> None:
    """Show the USDC balance of the user's main wallet."""
    if not message.from_user:
        return

    network = get_settings().primary_network
    wallet = await get_user_store().get_wallet(message.from_user.id, network)
    if not wallet:
        await message.answer(f"No wallet found for {network}. Say /start to create one.")
        return

    try:
        balance = await get_wallet_gateway().get_balance(wallet.wallet_id, network)
    except Exception as e:
        logger.error(f"Balance lookup failed for {wallet.wallet_id}: {e}")
        await message.answer(describe_error(e))
        return

    await message.answer(f"Your balance on {network}: {balance.amount} USDC")
