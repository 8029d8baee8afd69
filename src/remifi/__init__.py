"""RemiFi: conversational cross-chain USDC wallet."""

__version__ = "0.1.0"
