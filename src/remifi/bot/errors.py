"""Translate pipeline errors into chat replies."""

import logging

import httpx

from remifi.exceptions import (
    AttestationTimeoutError,
    BridgeError,
    ConfigurationError,
    InvalidAddressError,
    InvalidAmountError,
    LockTimeoutError,
    ProviderDegradedError,
    TransactionFailedError,
)

logger = logging.getLogger(__name__)


def describe_error(exc: Exception) -> str:
    """User-facing text for an error raised by a command."""
    if isinstance(exc, InvalidAmountError):
        return f"❌ {exc}\nPlease enter a positive USDC amount, e.g. 25.50"
    if isinstance(exc, InvalidAddressError):
        return f"❌ {exc}\nAddresses look like 0x followed by 40 hex characters."
    if isinstance(exc, ConfigurationError):
        return f"❌ {exc}"
    if isinstance(exc, ProviderDegradedError):
        return f"⚠️ {exc}"
    if isinstance(exc, AttestationTimeoutError):
        return f"⏳ {exc}"
    if isinstance(exc, TransactionFailedError):
        return f"❌ Transfer stopped at the {exc.step} step: {exc}"
    if isinstance(exc, BridgeError):
        return f"❌ Transfer failed: {exc}"
    if isinstance(exc, LockTimeoutError):
        return "⏳ Another operation on your account is still running. Please try again shortly."
    if isinstance(exc, httpx.HTTPStatusError):
        return f"❌ Our payment provider returned an error (HTTP {exc.response.status_code})."
    if isinstance(exc, httpx.HTTPError):
        return "❌ Our payment provider is unreachable right now. Please try again later."

    logger.exception(f"Unexpected error: {exc}")
    return "❌ Something went wrong. Please try again later."
