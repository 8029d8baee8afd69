"""On-ramp provider factory."""

from remifi.config import get_settings
from remifi.onramp.base import OnRampProvider
from remifi.onramp.circle_business import CircleBusinessProvider
from remifi.onramp.dryrun import DryRunOnRampProvider

# Singleton instance
_provider_instance: OnRampProvider | None = None


def get_onramp_provider() -> OnRampProvider:
    """Get the configured on-ramp provider.

    - circle_business: when CIRCLE_SANDBOX_API_KEY is set and dry-run is off
    - dryrun: simulated bank and payouts otherwise
    """
    global _provider_instance

    if _provider_instance is not None:
        return _provider_instance

    settings = get_settings()

    if settings.circle_sandbox_api_key and not settings.dry_run:
        _provider_instance = CircleBusinessProvider(
            api_key=settings.circle_sandbox_api_key,
            base_url=settings.circle_business_api_url,
        )
    else:
        _provider_instance = DryRunOnRampProvider()

    return _provider_instance


def reset_onramp_provider() -> None:
    """Reset provider instance (useful for testing)."""
    global _provider_instance
    _provider_instance = None
