"""Start and basic command handlers."""

import logging

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from remifi.bot.errors import describe_error
from remifi.config import get_settings
from remifi.services.wallets import get_or_create_wallet
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway

logger = logging.getLogger(__name__)

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message) -> None:
    """Handle /start command - register user and create the main wallet."""
    if not message.from_user:
        return

    settings = get_settings()
    store = get_user_store()
    network = settings.primary_network

    try:
        await store.upsert_user(
            user_id=message.from_user.id,
            username=message.from_user.username,
            first_name=message.from_user.first_name,
            last_name=message.from_user.last_name,
        )
        wallet = await store.get_wallet(message.from_user.id, network)
        if wallet is None:
            await message.answer(
                "I'm creating your secure digital dollar account now. "
                "This will just take a moment... 🛠️"
            )
            wallet = await get_or_create_wallet(
                store, get_wallet_gateway(), message.from_user.id, network
            )
    except Exception as e:
        logger.error(f"/start failed for {message.from_user.id}: {e}")
        await message.answer(describe_error(e))
        return

    first_name = message.from_user.first_name or "there"
    await message.answer(
        f"Welcome to RemiFi, {first_name}!\n\n"
        f"Your main account lives on {network}:\n"
        f"{wallet.address}\n\n"
        "Commands:\n"
        "  /address - Show your wallet address\n"
        "  /balance - Show your USDC balance\n"
        "  /send <address> <amount> - Send USDC on your main network\n"
        "  /deposit <amount> - Deposit dollars from your bank\n"
        "  /bridge <network> <address> <amount> - Send USDC to another chain"
    )


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    """Handle /help command."""
    await message.answer(
        "RemiFi Bot Commands\n\n"
        "  /start   - Create your account\n"
        "  /address - Show your wallet address\n"
        "  /balance - Show your USDC balance\n"
        "  /send <address> <amount>\n"
        "           Send USDC to an address on your main network\n"
        "  /deposit <amount>\n"
        "           Deposit dollars (sandbox bank, mocked wire)\n"
        "  /bridge <network> <address> <amount>\n"
        "           Move USDC cross-chain, e.g. /bridge BASE-SEPOLIA 0xabc... 10"
    )
