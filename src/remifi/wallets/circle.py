"""Circle developer-controlled wallets gateway.

Talks to the Circle Web3 Services REST API. Every mutating request must carry
a fresh ``entitySecretCiphertext`` (the entity secret encrypted with Circle's
RSA public key) and a unique idempotency key.

Docs: https://developers.circle.com/w3s/reference
"""

import base64
import logging
import uuid
from decimal import Decimal
from typing import Any, Optional

import httpx
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from remifi.chains import ChainRegistry, get_chain_registry
from remifi.wallets.base import (
    Balance,
    FeeLevel,
    TransactionState,
    TransactionStatus,
    Wallet,
    WalletGateway,
)

logger = logging.getLogger(__name__)

CIRCLE_CONFIRMED_STATES = {"CONFIRMED", "COMPLETE"}
CIRCLE_FAILED_STATES = {"FAILED", "DENIED", "CANCELLED"}


def map_circle_state(state: Optional[str]) -> TransactionState:
    """Map a Circle transaction state onto the normalized state."""
    state = (state or "").upper()
    if state in CIRCLE_CONFIRMED_STATES:
        return TransactionState.CONFIRMED
    if state in CIRCLE_FAILED_STATES:
        return TransactionState.FAILED
    return TransactionState.PENDING


def encrypt_entity_secret(entity_secret: str, public_key_pem: str) -> str:
    """Encrypt the hex entity secret with RSA-OAEP (SHA-256).

    Returns:
        Base64 ciphertext accepted as ``entitySecretCiphertext``
    """
    public_key = serialization.load_pem_public_key(public_key_pem.encode())
    ciphertext = public_key.encrypt(
        bytes.fromhex(entity_secret),
        padding.OAEP(
            mgf=padding.MGF1(algorithm=hashes.SHA256()),
            algorithm=hashes.SHA256(),
            label=None,
        ),
    )
    return base64.b64encode(ciphertext).decode()


class CircleWalletGateway(WalletGateway):
    """Wallet gateway backed by Circle developer-controlled wallets."""

    def __init__(
        self,
        api_key: str,
        entity_secret: str,
        base_url: str = "https://api.circle.com/v1/w3s",
        wallet_set_id: Optional[str] = None,
        wallet_set_name: str = "RemiFi wallets",
        registry: Optional[ChainRegistry] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Initialize Circle gateway.

        Args:
            api_key: Circle W3S API key
            entity_secret: Hex encoded entity secret
            base_url: API base URL override
            wallet_set_id: Existing wallet set (created lazily if None)
            wallet_set_name: Name for a lazily created wallet set
            registry: Chain registry used to resolve USDC contracts
            transport: Optional httpx transport (tests)
            timeout: Per-request timeout in seconds
        """
        if not api_key or not entity_secret:
            raise ValueError("Circle API key or entity secret is missing")

        self.api_key = api_key
        self.entity_secret = entity_secret
        self.base_url = base_url.rstrip("/")
        self.wallet_set_id = wallet_set_id
        self.wallet_set_name = wallet_set_name
        self.registry = registry or get_chain_registry()
        self._transport = transport
        self._timeout = timeout
        self._public_key_pem: Optional[str] = None

    @property
    def name(self) -> str:
        return "circle"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict:
        async with self._client() as client:
            response = await client.request(method, path, json=json, params=params)
            response.raise_for_status()
            return response.json().get("data", {})

    async def _entity_secret_ciphertext(self) -> str:
        """Build a fresh ciphertext; Circle rejects reused ones."""
        if self._public_key_pem is None:
            data = await self._request("GET", "/config/entity/publicKey")
            self._public_key_pem = data["publicKey"]
        return encrypt_entity_secret(self.entity_secret, self._public_key_pem)

    async def _ensure_wallet_set(self) -> str:
        if self.wallet_set_id:
            return self.wallet_set_id

        data = await self._request(
            "POST",
            "/developer/walletSets",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "name": self.wallet_set_name,
                "entitySecretCiphertext": await self._entity_secret_ciphertext(),
            },
        )
        self.wallet_set_id = data["walletSet"]["id"]
        logger.info(f"Created Circle wallet set {self.wallet_set_id}")
        return self.wallet_set_id

    async def create_wallet(self, network: str) -> Wallet:
        network = network.upper()
        wallet_set_id = await self._ensure_wallet_set()
        account_type = "EOA" if network.startswith("AVAX") else "SCA"

        data = await self._request(
            "POST",
            "/developer/wallets",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "blockchains": [network],
                "accountType": account_type,
                "walletSetId": wallet_set_id,
                "count": 1,
                "entitySecretCiphertext": await self._entity_secret_ciphertext(),
            },
        )
        wallet = data["wallets"][0]
        logger.info(f"Created {account_type} wallet {wallet['id']} on {network}")
        return Wallet(
            wallet_id=wallet["id"],
            address=wallet["address"],
            network=wallet.get("blockchain", network),
        )

    async def get_balance(self, wallet_id: str, network: str) -> Balance:
        usdc = self.registry.get(network).usdc_address.lower()
        data = await self._request("GET", f"/wallets/{wallet_id}/balances")

        for entry in data.get("tokenBalances", []):
            token = entry.get("token", {})
            token_address = (token.get("tokenAddress") or "").lower()
            if token_address == usdc or token.get("symbol") == "USDC":
                return Balance(amount=Decimal(entry.get("amount", "0")), network=network)

        return Balance(amount=Decimal("0"), network=network)

    async def send_transfer(
        self,
        wallet_id: str,
        network: str,
        destination_address: str,
        amount: Decimal,
        fee_level: FeeLevel = FeeLevel.LOW,
    ) -> str:
        chain = self.registry.get(network)
        data = await self._request(
            "POST",
            "/developer/transactions/transfer",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "entitySecretCiphertext": await self._entity_secret_ciphertext(),
                "walletId": wallet_id,
                "blockchain": chain.network,
                "tokenAddress": chain.usdc_address,
                "destinationAddress": destination_address,
                "amounts": [str(amount)],
                "feeLevel": FeeLevel(fee_level).value,
            },
        )
        logger.info(f"Transfer {data['id']} submitted from wallet {wallet_id}")
        return data["id"]

    async def submit_contract_call(
        self,
        wallet_id: str,
        contract_address: str,
        function_signature: str,
        parameters: list[Any],
        fee_level: FeeLevel = FeeLevel.MEDIUM,
    ) -> str:
        data = await self._request(
            "POST",
            "/developer/transactions/contractExecution",
            json={
                "idempotencyKey": str(uuid.uuid4()),
                "entitySecretCiphertext": await self._entity_secret_ciphertext(),
                "walletId": wallet_id,
                "contractAddress": contract_address,
                "abiFunctionSignature": function_signature,
                "abiParameters": [str(p) for p in parameters],
                "feeLevel": FeeLevel(fee_level).value,
            },
        )
        logger.info(f"{function_signature} submitted as {data['id']} from wallet {wallet_id}")
        return data["id"]

    async def get_transaction_status(self, tx_id: str) -> TransactionStatus:
        data = await self._request("GET", f"/transactions/{tx_id}")
        tx = data.get("transaction", {})
        raw_state = tx.get("state")
        return TransactionStatus(
            tx_id=tx_id,
            state=map_circle_state(raw_state),
            tx_hash=tx.get("txHash"),
            raw_state=raw_state,
            error=tx.get("errorReason"),
        )
