"""Circle CCTP V2 bridging."""

from remifi.bridge.attestation import Attestation, AttestationPoller
from remifi.bridge.transfer import (
    BridgeTransactionRecord,
    CrossChainTransferOrchestrator,
    TransferRequest,
    TransferState,
    TransferStep,
)

__all__ = [
    "Attestation",
    "AttestationPoller",
    "BridgeTransactionRecord",
    "CrossChainTransferOrchestrator",
    "TransferRequest",
    "TransferState",
    "TransferStep",
]
