"""Error taxonomy for the bridge and deposit pipelines.

All errors propagate unmodified to the chat layer, which turns them into
user-facing text. Bridge errors carry the transfer state reached before the
failure so the caller can persist it and resume later.
"""

from typing import Any, Optional


class RemifiError(Exception):
    """Base class for all RemiFi errors."""

    pass


class ConfigurationError(RemifiError):
    """A network is missing from (or incomplete in) the chain registry."""

    pass


class InvalidAmountError(RemifiError, ValueError):
    """Amount is not a positive USDC quantity."""

    pass


class InvalidAddressError(RemifiError, ValueError):
    """Address is not a well-formed EVM address."""

    pass


class BridgeError(RemifiError):
    """Base class for errors that abort a cross-chain transfer."""

    def __init__(self, message: str, transfer_state: Optional[Any] = None):
        super().__init__(message)
        self.transfer_state = transfer_state


class TransactionFailedError(BridgeError):
    """An on-chain transaction reached a failed terminal state."""

    def __init__(
        self,
        step: str,
        tx_id: str,
        message: Optional[str] = None,
        transfer_state: Optional[Any] = None,
    ):
        self.step = step
        self.tx_id = tx_id
        super().__init__(
            message or f"{step.capitalize()} transaction {tx_id} failed",
            transfer_state=transfer_state,
        )


class TransactionTimeoutError(TransactionFailedError):
    """A transaction did not reach a terminal state within the poll ceiling."""

    def __init__(self, step: str, tx_id: str, attempts: int, transfer_state: Optional[Any] = None):
        self.attempts = attempts
        super().__init__(
            step,
            tx_id,
            message=(
                f"{step.capitalize()} transaction {tx_id} still pending after "
                f"{attempts} status checks"
            ),
            transfer_state=transfer_state,
        )


class AttestationTimeoutError(BridgeError):
    """Attestation was not available within the bounded polling window."""

    def __init__(self, source_domain: int, tx_hash: str, attempts: int):
        self.source_domain = source_domain
        self.tx_hash = tx_hash
        self.attempts = attempts
        super().__init__(
            f"Attestation for {tx_hash} (domain {source_domain}) not ready after "
            f"{attempts} attempts. The transfer may still complete later; "
            f"check the burn transaction manually before retrying."
        )


class ProviderDegradedError(RemifiError):
    """On-ramp payout was rejected; the user should fund the wallet from a faucet."""

    def __init__(self, faucet_url: str, address: str, reason: str = ""):
        self.faucet_url = faucet_url
        self.address = address
        self.reason = reason
        super().__init__(
            f"The deposit provider could not pay out to your wallet"
            f"{f' ({reason})' if reason else ''}. "
            f"You can fund it with test USDC from {faucet_url} "
            f"using the address {address}."
        )


class DuplicateResourceError(RemifiError):
    """An idempotent provider create step raced with another request."""

    pass


class LockTimeoutError(RemifiError):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass
