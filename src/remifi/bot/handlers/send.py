"""Direct USDC send handler."""

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from remifi.bot.errors import describe_error
from remifi.bridge.encoding import is_evm_address, parse_amount
from remifi.config import get_settings
from remifi.exceptions import InvalidAddressError
from remifi.onramp.deposit import format_usd
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway

logger = logging.getLogger(__name__)

router = Router()

USAGE = "Invalid format. Use: /send <address> <amount>"


@router.message(Command("send"))
async def cmd_send(message: Message, command: CommandObject) -> None:
    """Send USDC from the main wallet on the same network: /send <address> <amount>."""
    if not message.from_user:
        return

    params = (command.args or "").split()
    if len(params) != 2:
        await message.answer(USAGE)
        return
    destination_address, amount = params

    network = get_settings().primary_network
    user_id = message.from_user.id

    wallet = await get_user_store().get_wallet(user_id, network)
    if not wallet:
        await message.answer("You need a wallet to send money. Say /start to get started!")
        return

    try:
        amount = parse_amount(amount)
        if not is_evm_address(destination_address):
            raise InvalidAddressError(
                f"Recipient {destination_address!r} is not a valid address on {network}"
            )

        await message.answer(
            f"Got it. Sending ${format_usd(amount)} to {destination_address}... 💸"
        )
        tx_id = await get_wallet_gateway().send_transfer(
            wallet.wallet_id, network, destination_address, amount
        )
    except Exception as e:
        logger.error(f"Send from {wallet.wallet_id} failed: {e}")
        await message.answer(describe_error(e))
        return

    logger.info(f"User {user_id} sent {amount} USDC to {destination_address} ({tx_id})")
    await message.answer(
        "✅ All set!\n\n"
        f"I've sent ${format_usd(amount)} to {destination_address}.\n"
        f"Transaction ID: {tx_id}"
    )
