"""Fiat on-ramp providers and the deposit-and-bridge pipeline."""

from remifi.onramp.base import BillingDetails, OnRampProvider, WireInstructions
from remifi.onramp.factory import get_onramp_provider, reset_onramp_provider

__all__ = [
    "BillingDetails",
    "OnRampProvider",
    "WireInstructions",
    "get_onramp_provider",
    "reset_onramp_provider",
]
