"""Wallet gateway factory."""

from remifi.config import get_settings
from remifi.wallets.base import WalletGateway
from remifi.wallets.circle import CircleWalletGateway
from remifi.wallets.dryrun import DryRunWalletGateway

# Singleton instance
_gateway_instance: WalletGateway | None = None


def get_wallet_gateway() -> WalletGateway:
    """Get the configured wallet gateway.

    Uses Circle developer-controlled wallets when credentials are configured
    and dry-run mode is off; otherwise falls back to the simulated gateway.
    """
    global _gateway_instance

    if _gateway_instance is not None:
        return _gateway_instance

    settings = get_settings()

    if settings.has_circle_wallets and not settings.dry_run:
        _gateway_instance = CircleWalletGateway(
            api_key=settings.circle_api_key,
            entity_secret=settings.circle_entity_secret,
            base_url=settings.circle_api_url,
            wallet_set_name=settings.circle_wallet_set_name,
        )
    else:
        _gateway_instance = DryRunWalletGateway()

    return _gateway_instance


def reset_wallet_gateway() -> None:
    """Reset gateway instance (useful for testing)."""
    global _gateway_instance
    _gateway_instance = None
