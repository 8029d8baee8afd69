"""Circle CCTP V2 attestation poller.

After ``depositForBurn()`` confirms on the source chain, Circle's Iris
service signs the burn message. ``receiveMessage()`` on the destination
chain needs both the message and that signature.

Polling policy: fixed interval (10s), at most 30 attempts. A 404 means the
burn is not indexed yet and is retried; any other HTTP error aborts.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from remifi.exceptions import AttestationTimeoutError
from remifi.utils.polling import PollState, Poller

logger = logging.getLogger(__name__)

#: HTTP 404 status code indicating the message is not indexed yet
HTTP_NOT_FOUND = 404

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_MAX_ATTEMPTS = 30


@dataclass(frozen=True)
class Attestation:
    """Signed CCTP message, 0x-prefixed hex as returned by Iris."""

    message: str
    attestation: str

    @property
    def message_bytes(self) -> bytes:
        return bytes.fromhex(self.message.removeprefix("0x"))

    @property
    def attestation_bytes(self) -> bytes:
        return bytes.fromhex(self.attestation.removeprefix("0x"))


class AttestationPoller:
    """Waits for an Iris attestation of a burn transaction."""

    def __init__(
        self,
        api_url: str = "https://iris-api-sandbox.circle.com",
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Initialize poller.

        Args:
            api_url: Iris API base URL
            interval: Seconds between attempts
            max_attempts: Attempts before AttestationTimeoutError
            api_key: Optional bearer token
            transport: Optional httpx transport (tests)
            timeout: Per-request timeout in seconds
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.api_url = api_url.rstrip("/")
        self.interval = interval
        self.max_attempts = max_attempts
        self.api_key = api_key
        self._transport = transport
        self._timeout = timeout

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def fetch(
        self, client: httpx.AsyncClient, source_domain: int, tx_hash: str
    ) -> tuple[PollState, Optional[Attestation]]:
        """One attestation lookup.

        Returns:
            (CONFIRMED, attestation) when complete, (PENDING, None) otherwise

        Raises:
            httpx.HTTPStatusError: For any non-404 error response
        """
        response = await client.get(
            f"{self.api_url}/v2/messages/{source_domain}",
            params={"transactionHash": tx_hash},
            headers=self._headers(),
        )

        if response.status_code == HTTP_NOT_FOUND:
            logger.info(f"Attestation for {tx_hash} not indexed yet (404)")
            return PollState.PENDING, None

        response.raise_for_status()

        messages = response.json().get("messages") or []
        if messages:
            msg = messages[0]
            status = msg.get("status", "")
            attestation = msg.get("attestation")
            if status == "complete" and attestation and attestation != "PENDING":
                return PollState.CONFIRMED, Attestation(
                    message=msg.get("message", ""),
                    attestation=attestation,
                )
            logger.info(f"Attestation status for {tx_hash}: {status or 'unknown'}")

        return PollState.PENDING, None

    async def wait_for_attestation(self, source_domain: int, tx_hash: str) -> Attestation:
        """Poll Iris until the burn is attested.

        Args:
            source_domain: CCTP domain id of the source chain
            tx_hash: On-chain hash of the burn transaction

        Returns:
            Attestation with message and signature

        Raises:
            AttestationTimeoutError: After max_attempts unsuccessful polls
            httpx.HTTPError: For non-retryable API or transport errors
        """
        if not tx_hash.startswith("0x"):
            tx_hash = f"0x{tx_hash}"

        poller = Poller(
            interval=self.interval,
            max_attempts=self.max_attempts,
            name=f"attestation {tx_hash[:10]}",
        )

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            result = await poller.run(lambda: self.fetch(client, source_domain, tx_hash))

        if result.state == PollState.TIMED_OUT:
            raise AttestationTimeoutError(source_domain, tx_hash, result.attempts)

        logger.info(f"Attestation for {tx_hash} received after {result.attempts} attempt(s)")
        return result.value
