"""Cross-chain USDC transfers over Circle CCTP V2.

A transfer moves USDC from a custodial wallet on the source network to a
wallet on the destination network in four strictly sequential steps:

1. approve   - allow the source TokenMessenger to pull the amount
2. burn      - ``depositForBurn()`` on the source TokenMessenger
3. attest    - wait for Circle's Iris signature over the burn message
4. receive   - ``receiveMessage()`` on the destination MessageTransmitter

A step starts only after the previous step's transaction is confirmed.
Nothing is rolled back on failure: the error carries the ``TransferState``
reached so far, and ``resume()`` continues from the last completed step.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Optional

from remifi.bridge.attestation import Attestation, AttestationPoller
from remifi.bridge.encoding import (
    FINALITY_THRESHOLD_FAST,
    ZERO_BYTES32,
    address_to_bytes32,
    compute_max_fee,
    is_evm_address,
    parse_amount,
    to_base_units,
)
from remifi.chains import ChainRegistry, get_chain_registry
from remifi.config import Settings, get_settings
from remifi.exceptions import (
    BridgeError,
    ConfigurationError,
    InvalidAddressError,
    TransactionFailedError,
    TransactionTimeoutError,
)
from remifi.notifications.base import ConversationId, ProgressNotifier, notify_safely
from remifi.utils.locks import KeyedLock
from remifi.utils.polling import PollState, Poller
from remifi.wallets.base import FeeLevel, TransactionState, TransactionStatus, WalletGateway

logger = logging.getLogger(__name__)

APPROVE_SIGNATURE = "approve(address,uint256)"
DEPOSIT_FOR_BURN_SIGNATURE = "depositForBurn(uint256,uint32,bytes32,address,bytes32,uint256,uint32)"
RECEIVE_MESSAGE_SIGNATURE = "receiveMessage(bytes,bytes)"


class TransferStep(str, Enum):
    """Next step a transfer has to run."""

    APPROVE = "approve"
    BURN = "burn"
    ATTEST = "attest"
    RECEIVE = "receive"
    COMPLETE = "complete"


@dataclass(frozen=True)
class TransferRequest:
    """One bridge operation."""

    source_wallet_id: str
    source_network: str
    destination_network: str
    destination_address: str
    destination_wallet_id: str
    amount: Decimal


@dataclass(frozen=True)
class BridgeTransactionRecord:
    """Provider transaction ids of a completed transfer."""

    approve_tx_id: str
    burn_tx_id: str
    receive_tx_id: str


@dataclass
class TransferState:
    """Resumable progress of one transfer."""

    request: TransferRequest
    step: TransferStep = TransferStep.APPROVE
    approve_tx_id: Optional[str] = None
    burn_tx_id: Optional[str] = None
    burn_tx_hash: Optional[str] = None
    attestation: Optional[Attestation] = None
    receive_tx_id: Optional[str] = None
    failures: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.step == TransferStep.COMPLETE

    def to_record(self) -> BridgeTransactionRecord:
        if not self.is_complete:
            raise BridgeError(f"Transfer stopped at step {self.step.value}", transfer_state=self)
        return BridgeTransactionRecord(
            approve_tx_id=self.approve_tx_id,
            burn_tx_id=self.burn_tx_id,
            receive_tx_id=self.receive_tx_id,
        )

    def to_dict(self) -> dict:
        """Serializable form for the caller to persist."""
        return {
            "request": {
                "source_wallet_id": self.request.source_wallet_id,
                "source_network": self.request.source_network,
                "destination_network": self.request.destination_network,
                "destination_address": self.request.destination_address,
                "destination_wallet_id": self.request.destination_wallet_id,
                "amount": str(self.request.amount),
            },
            "step": self.step.value,
            "approve_tx_id": self.approve_tx_id,
            "burn_tx_id": self.burn_tx_id,
            "burn_tx_hash": self.burn_tx_hash,
            "attestation": (
                {"message": self.attestation.message, "attestation": self.attestation.attestation}
                if self.attestation
                else None
            ),
            "receive_tx_id": self.receive_tx_id,
            "failures": list(self.failures),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TransferState":
        request = dict(data["request"])
        request["amount"] = Decimal(request["amount"])
        attestation = data.get("attestation")
        return cls(
            request=TransferRequest(**request),
            step=TransferStep(data.get("step", TransferStep.APPROVE.value)),
            approve_tx_id=data.get("approve_tx_id"),
            burn_tx_id=data.get("burn_tx_id"),
            burn_tx_hash=data.get("burn_tx_hash"),
            attestation=Attestation(**attestation) if attestation else None,
            receive_tx_id=data.get("receive_tx_id"),
            failures=list(data.get("failures", [])),
        )


class CrossChainTransferOrchestrator:
    """Drives approve -> burn -> attest -> receive across two networks."""

    def __init__(
        self,
        gateway: WalletGateway,
        attestation_poller: AttestationPoller,
        registry: Optional[ChainRegistry] = None,
        notifier: Optional[ProgressNotifier] = None,
        tx_poll_interval: float = 2.0,
        tx_poll_max_attempts: Optional[int] = 300,
        attestation_settle_delay: float = 2.0,
    ):
        """Initialize orchestrator.

        Args:
            gateway: Custodial wallet gateway
            attestation_poller: Iris attestation poller
            registry: Chain registry (built-in chains if None)
            notifier: Progress sink for the chat layer
            tx_poll_interval: Seconds between transaction status polls
            tx_poll_max_attempts: Status poll ceiling (None or 0 = unbounded)
            attestation_settle_delay: Delay after burn before polling Iris
        """
        self.gateway = gateway
        self.attestation_poller = attestation_poller
        self.registry = registry or get_chain_registry()
        self.notifier = notifier
        self.tx_poll_interval = tx_poll_interval
        self.tx_poll_max_attempts = tx_poll_max_attempts
        self.attestation_settle_delay = attestation_settle_delay

    @classmethod
    def from_settings(
        cls,
        gateway: WalletGateway,
        notifier: Optional[ProgressNotifier] = None,
        settings: Optional[Settings] = None,
        registry: Optional[ChainRegistry] = None,
    ) -> "CrossChainTransferOrchestrator":
        """Build an orchestrator using the configured polling policy."""
        settings = settings or get_settings()
        poller = AttestationPoller(
            api_url=settings.iris_api_url,
            interval=settings.attestation_poll_interval,
            max_attempts=settings.attestation_max_attempts,
        )
        return cls(
            gateway=gateway,
            attestation_poller=poller,
            registry=registry,
            notifier=notifier,
            tx_poll_interval=settings.tx_poll_interval,
            tx_poll_max_attempts=settings.tx_poll_max_attempts,
            attestation_settle_delay=settings.attestation_settle_delay,
        )

    def prepare(
        self,
        source_wallet_id: str,
        source_network: str,
        destination_network: str,
        destination_address: str,
        destination_wallet_id: str,
        amount,
    ) -> TransferState:
        """Validate a transfer and build its initial state.

        Raises:
            ConfigurationError: If either network is not in the registry, or
                both networks are the same
            InvalidAmountError: If the amount is not a positive USDC amount
            InvalidAddressError: If the destination address is malformed
        """
        request = TransferRequest(
            source_wallet_id=source_wallet_id,
            source_network=source_network.upper(),
            destination_network=destination_network.upper(),
            destination_address=destination_address.strip(),
            destination_wallet_id=destination_wallet_id,
            amount=parse_amount(amount),
        )
        self._validate(request)
        return TransferState(request=request)

    def _validate(self, request: TransferRequest) -> None:
        self.registry.get(request.source_network)
        self.registry.get(request.destination_network)
        if request.source_network == request.destination_network:
            raise ConfigurationError(
                f"Source and destination networks must differ ({request.source_network})"
            )
        if not is_evm_address(request.destination_address):
            raise InvalidAddressError(
                f"Destination address {request.destination_address!r} is not valid "
                f"for {request.destination_network}"
            )

    def _check_resumable(self, state: TransferState) -> None:
        """Reject restored states missing what their next step needs."""
        if state.step == TransferStep.ATTEST and not state.burn_tx_hash:
            raise BridgeError(
                "Cannot resume at attest without the burn transaction hash",
                transfer_state=state,
            )
        if state.step == TransferStep.RECEIVE and state.attestation is None:
            raise BridgeError(
                "Cannot resume at receive without an attestation", transfer_state=state
            )

    async def transfer(
        self,
        source_wallet_id: str,
        source_network: str,
        destination_network: str,
        destination_address: str,
        destination_wallet_id: str,
        amount,
        conversation_id: Optional[ConversationId] = None,
    ) -> BridgeTransactionRecord:
        """Move USDC from the source wallet to the destination network.

        Returns:
            The approve, burn and receive transaction ids

        Raises:
            TransactionFailedError: A step's transaction failed (or timed out)
            AttestationTimeoutError: Iris did not attest in time
        """
        state = self.prepare(
            source_wallet_id,
            source_network,
            destination_network,
            destination_address,
            destination_wallet_id,
            amount,
        )
        return await self.resume(state, conversation_id)

    async def resume(
        self,
        state: TransferState,
        conversation_id: Optional[ConversationId] = None,
    ) -> BridgeTransactionRecord:
        """Run a transfer from its recorded step to completion.

        ``state`` is updated in place as steps complete.
        """
        self._validate(state.request)
        request = state.request
        self._check_resumable(state)

        async with KeyedLock(f"wallet:{request.source_wallet_id}", operation="bridge"):
            logger.info(
                f"Bridging {request.amount} USDC {request.source_network} -> "
                f"{request.destination_network} from step {state.step.value}"
            )
            try:
                if state.step == TransferStep.APPROVE:
                    await self._approve(state, conversation_id)
                if state.step == TransferStep.BURN:
                    await self._burn(state, conversation_id)
                if state.step == TransferStep.ATTEST:
                    await self._attest(state, conversation_id)
                if state.step == TransferStep.RECEIVE:
                    await self._receive(state, conversation_id)
            except Exception as e:
                if getattr(e, "transfer_state", None) is None:
                    e.transfer_state = state
                state.failures.append(f"{state.step.value}: {e}")
                logger.error(f"Bridge aborted at {state.step.value}: {e}")
                raise

        logger.info(
            f"Bridge complete: approve={state.approve_tx_id} burn={state.burn_tx_id} "
            f"receive={state.receive_tx_id}"
        )
        return state.to_record()

    # ======================
    # Steps
    # ======================

    async def _approve(self, state: TransferState, conversation_id) -> None:
        request = state.request
        source = self.registry.get(request.source_network)
        amount = to_base_units(request.amount)

        await notify_safely(self.notifier, conversation_id, "Step 1/4: Approving USDC transfer...")

        async def submit() -> str:
            return await self.gateway.submit_contract_call(
                request.source_wallet_id,
                source.usdc_address,
                APPROVE_SIGNATURE,
                [source.token_messenger_address, amount],
                FeeLevel.LOW,
            )

        tx_id = await self._submit_or_reuse(state.approve_tx_id, submit)
        state.approve_tx_id = tx_id
        await self._wait_for_confirmation(TransferStep.APPROVE, tx_id)

        await notify_safely(
            self.notifier, conversation_id, f"✅ Approval transaction confirmed: {tx_id}"
        )
        state.step = TransferStep.BURN

    async def _burn(self, state: TransferState, conversation_id) -> None:
        request = state.request
        source = self.registry.get(request.source_network)
        destination = self.registry.get(request.destination_network)
        amount = to_base_units(request.amount)

        await notify_safely(self.notifier, conversation_id, "Step 2/4: Initiating USDC burn...")

        async def submit() -> str:
            return await self.gateway.submit_contract_call(
                request.source_wallet_id,
                source.token_messenger_address,
                DEPOSIT_FOR_BURN_SIGNATURE,
                [
                    amount,
                    destination.domain_id,
                    address_to_bytes32(request.destination_address),
                    source.usdc_address,
                    ZERO_BYTES32,
                    compute_max_fee(amount),
                    FINALITY_THRESHOLD_FAST,
                ],
                FeeLevel.MEDIUM,
            )

        tx_id = await self._submit_or_reuse(state.burn_tx_id, submit)
        state.burn_tx_id = tx_id
        status = await self._wait_for_confirmation(TransferStep.BURN, tx_id)

        if not status.tx_hash:
            raise TransactionFailedError(
                TransferStep.BURN.value,
                tx_id,
                message=f"Burn transaction {tx_id} confirmed without an on-chain hash",
            )
        state.burn_tx_hash = status.tx_hash

        await notify_safely(self.notifier, conversation_id, f"✅ Burn transaction confirmed: {tx_id}")
        state.step = TransferStep.ATTEST

    async def _attest(self, state: TransferState, conversation_id) -> None:
        source = self.registry.get(state.request.source_network)

        await notify_safely(self.notifier, conversation_id, "Step 3/4: Waiting for attestation...")

        if self.attestation_settle_delay:
            await asyncio.sleep(self.attestation_settle_delay)

        state.attestation = await self.attestation_poller.wait_for_attestation(
            source.domain_id, state.burn_tx_hash
        )

        await notify_safely(self.notifier, conversation_id, "✅ Attestation received!")
        state.step = TransferStep.RECEIVE

    async def _receive(self, state: TransferState, conversation_id) -> None:
        request = state.request
        destination = self.registry.get(request.destination_network)
        attestation = state.attestation

        await notify_safely(
            self.notifier,
            conversation_id,
            "Step 4/4: Finalizing transfer on destination chain...",
        )

        async def submit() -> str:
            return await self.gateway.submit_contract_call(
                request.destination_wallet_id,
                destination.message_transmitter_address,
                RECEIVE_MESSAGE_SIGNATURE,
                [attestation.message, attestation.attestation],
                FeeLevel.MEDIUM,
            )

        tx_id = await self._submit_or_reuse(state.receive_tx_id, submit)
        state.receive_tx_id = tx_id
        await self._wait_for_confirmation(TransferStep.RECEIVE, tx_id)

        await notify_safely(
            self.notifier, conversation_id, f"✅ Receive transaction confirmed: {tx_id}"
        )
        state.step = TransferStep.COMPLETE

    # ======================
    # Transaction helpers
    # ======================

    async def _submit_or_reuse(
        self, existing_tx_id: Optional[str], submit: Callable[[], Awaitable[str]]
    ) -> str:
        """Reuse a previously submitted transaction unless it failed.

        Only reached with an existing id when resuming, so a burn that may
        still land is never submitted twice.
        """
        if existing_tx_id:
            status = await self.gateway.get_transaction_status(existing_tx_id)
            if status.state != TransactionState.FAILED:
                logger.info(f"Resuming with existing transaction {existing_tx_id}")
                return existing_tx_id
            logger.info(f"Previous transaction {existing_tx_id} failed, resubmitting")
        return await submit()

    async def _wait_for_confirmation(self, step: TransferStep, tx_id: str) -> TransactionStatus:
        """Poll a transaction until it is confirmed.

        Raises:
            TransactionFailedError: The transaction failed
            TransactionTimeoutError: Still pending at the poll ceiling
        """
        poller = Poller(
            interval=self.tx_poll_interval,
            max_attempts=self.tx_poll_max_attempts,
            name=f"{step.value} {tx_id}",
        )

        async def check() -> tuple[PollState, TransactionStatus]:
            status = await self.gateway.get_transaction_status(tx_id)
            return PollState(status.state.value), status

        result = await poller.run(check)

        if result.state == PollState.FAILED:
            reason = result.value.error if result.value else None
            raise TransactionFailedError(
                step.value,
                tx_id,
                message=(
                    f"{step.value.capitalize()} transaction {tx_id} failed"
                    f"{f': {reason}' if reason else ''}"
                ),
            )
        if result.state == PollState.TIMED_OUT:
            raise TransactionTimeoutError(step.value, tx_id, result.attempts)

        logger.info(f"{step.value} transaction {tx_id} confirmed ({result.value.tx_hash})")
        return result.value
