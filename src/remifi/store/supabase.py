"""Supabase (PostgREST) user and wallet store.

Tables ``users`` and ``wallets`` are owned by the Supabase project; this
client only issues the handful of queries the bot needs.
"""

import logging
from typing import Optional

import httpx

from remifi.exceptions import DuplicateResourceError
from remifi.store.base import UserProfile, UserStore
from remifi.wallets.base import Wallet

logger = logging.getLogger(__name__)

#: Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def _profile_from_row(row: dict) -> UserProfile:
    return UserProfile(
        user_id=int(row["tg_id"]),
        username=row.get("tg_username"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        bank_account_id=row.get("circle_bank_account_id"),
        recipient_address_id=row.get("circle_recipient_address_id"),
    )


class SupabaseUserStore(UserStore):
    """User store backed by the Supabase REST API."""

    def __init__(
        self,
        url: str,
        key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        if not url or not key:
            raise ValueError("Supabase URL or key is missing")
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.key = key
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.rest_url,
            headers={
                "apikey": self.key,
                "Authorization": f"Bearer {self.key}",
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    async def upsert_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserProfile:
        async with self._client() as client:
            response = await client.post(
                "/users",
                params={"on_conflict": "tg_id"},
                headers={"Prefer": "resolution=merge-duplicates,return=representation"},
                json={
                    "tg_id": user_id,
                    "tg_username": username,
                    "first_name": first_name,
                    "last_name": last_name,
                },
            )
            response.raise_for_status()
            return _profile_from_row(response.json()[0])

    async def get_user(self, user_id: int) -> Optional[UserProfile]:
        async with self._client() as client:
            response = await client.get(
                "/users", params={"tg_id": f"eq.{user_id}", "select": "*"}
            )
            response.raise_for_status()
            rows = response.json()
            return _profile_from_row(rows[0]) if rows else None

    async def get_wallet(self, user_id: int, network: str) -> Optional[Wallet]:
        network = network.upper()
        async with self._client() as client:
            response = await client.get(
                "/wallets",
                params={
                    "tg_id": f"eq.{user_id}",
                    "network": f"eq.{network}",
                    "select": "walletid,walletaddress,network",
                },
            )
            response.raise_for_status()
            rows = response.json()

        if not rows:
            return None
        row = rows[0]
        return Wallet(
            wallet_id=row["walletid"],
            address=row["walletaddress"],
            network=row.get("network") or network,
        )

    async def save_wallet(self, user_id: int, wallet: Wallet) -> Wallet:
        async with self._client() as client:
            response = await client.post(
                "/wallets",
                headers={"Prefer": "return=representation"},
                json={
                    "tg_id": user_id,
                    "walletid": wallet.wallet_id,
                    "walletaddress": wallet.address,
                    "network": wallet.network.upper(),
                },
            )
            if response.status_code == 409 and response.json().get("code") == UNIQUE_VIOLATION:
                raise DuplicateResourceError(
                    f"User {user_id} already has a wallet on {wallet.network}"
                )
            response.raise_for_status()

        logger.info(f"Saved wallet {wallet.wallet_id} ({wallet.network}) for user {user_id}")
        return wallet

    async def update_provider_ids(
        self,
        user_id: int,
        bank_account_id: Optional[str] = None,
        recipient_address_id: Optional[str] = None,
    ) -> None:
        update = {}
        if bank_account_id:
            update["circle_bank_account_id"] = bank_account_id
        if recipient_address_id:
            update["circle_recipient_address_id"] = recipient_address_id
        if not update:
            return

        async with self._client() as client:
            response = await client.patch(
                "/users", params={"tg_id": f"eq.{user_id}"}, json=update
            )
            response.raise_for_status()
