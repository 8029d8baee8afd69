"""Polling runner for the RemiFi bot."""

import asyncio
import logging

from aiogram import Bot, Dispatcher

from remifi.bot.handlers import setup_routers
from remifi.config import get_settings
from remifi.notifications.telegram import close_bot, get_bot
from remifi.onramp import get_onramp_provider
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway

logger = logging.getLogger(__name__)

QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Request lines would repeat every poll of Circle and Iris
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("aiogram").setLevel(logging.INFO)


async def create_bot() -> tuple[Bot, Dispatcher]:
    """Build the shared bot and a dispatcher with every command router.

    The bot instance is the same one progress notifications go through.
    """
    bot = await get_bot()
    if bot is None:
        raise ValueError("TELEGRAM_BOT_TOKEN is not set")

    dp = Dispatcher()
    dp.include_router(setup_routers())
    return bot, dp


async def run_bot() -> None:
    """Run the bot in polling mode until interrupted."""
    settings = get_settings()
    configure_logging(settings.debug)

    logger.info(f"Starting RemiFi bot with {settings.get_safe_dict()}")
    logger.info(
        f"Backends: wallets={get_wallet_gateway().name} "
        f"onramp={get_onramp_provider().name} store={type(get_user_store()).__name__}"
    )

    bot, dp = await create_bot()
    try:
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot)
    finally:
        await close_bot()


def main() -> None:
    """Console script entry point."""
    asyncio.run(run_bot())


if __name__ == "__main__":
    main()
