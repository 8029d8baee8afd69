"""Bot handlers module."""

from aiogram import Router

from remifi.bot.handlers import bridge, deposit, send, start, wallet


def setup_routers() -> Router:
    """Create and configure all routers."""
    main_router = Router()

    # Register all routers
    main_router.include_router(start.router)
    main_router.include_router(wallet.router)
    main_router.include_router(send.router)
    main_router.include_router(bridge.router)
    main_router.include_router(deposit.router)

    return main_router
