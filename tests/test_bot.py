"""Tests for the chat command layer."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from aiogram.filters import CommandObject

from remifi.bot.bot import create_bot
from remifi.bot.errors import describe_error
from remifi.bot.handlers.bridge import USAGE, cmd_bridge
from remifi.bot.handlers.deposit import cmd_deposit
from remifi.bot.handlers.send import USAGE as SEND_USAGE
from remifi.bot.handlers.send import cmd_send
from remifi.bot.handlers.start import cmd_start
from remifi.bot.handlers.wallet import cmd_address
from remifi.exceptions import (
    AttestationTimeoutError,
    ConfigurationError,
    InvalidAddressError,
    InvalidAmountError,
    LockTimeoutError,
    ProviderDegradedError,
    TransactionFailedError,
)
from remifi.store import get_user_store
from remifi.wallets import get_wallet_gateway


def _message(user_id: int = 42) -> MagicMock:
    message = MagicMock()
    message.answer = AsyncMock()
    message.from_user.id = user_id
    message.from_user.username = "alice"
    message.from_user.first_name = "Alice"
    message.from_user.last_name = None
    message.chat.id = user_id
    message.bot = AsyncMock()
    return message


def _command(name: str, args=None) -> CommandObject:
    return CommandObject(prefix="/", command=name, args=args)


def _replies(message) -> list[str]:
    return [call.args[0] for call in message.answer.await_args_list]


class TestDescribeError:
    """Errors become chat replies."""

    def test_amount_and_address(self):
        assert "positive USDC amount" in describe_error(InvalidAmountError("bad"))
        assert "0x" in describe_error(InvalidAddressError("bad"))

    def test_configuration(self):
        text = describe_error(ConfigurationError("Network 'X' has no bridge configuration"))
        assert "no bridge configuration" in text

    def test_provider_degraded_names_faucet(self):
        text = describe_error(ProviderDegradedError("https://faucet.circle.com", "0xabc"))
        assert "https://faucet.circle.com" in text
        assert "0xabc" in text

    def test_bridge_errors(self):
        assert "burn step" in describe_error(TransactionFailedError("burn", "tx-1"))
        assert "may still complete" in describe_error(AttestationTimeoutError(6, "0xabc", 30))

    def test_lock_timeout(self):
        assert "try again" in describe_error(LockTimeoutError("busy"))

    def test_http_errors(self):
        request = httpx.Request("GET", "https://api.circle.com")
        error = httpx.HTTPStatusError(
            "boom", request=request, response=httpx.Response(503, request=request)
        )
        assert "503" in describe_error(error)
        assert "unreachable" in describe_error(httpx.ConnectError("down"))

    def test_unexpected_errors_are_generic(self):
        assert describe_error(RuntimeError("secret internals")) == (
            "❌ Something went wrong. Please try again later."
        )


class TestHandlers:
    """Command handlers in dry-run mode."""

    @pytest.mark.asyncio
    async def test_start_creates_primary_wallet(self):
        message = _message()

        await cmd_start(message)

        wallet = await get_user_store().get_wallet(42, "ARC-TESTNET")
        assert wallet is not None
        assert wallet.address in _replies(message)[-1]

    @pytest.mark.asyncio
    async def test_address_without_wallet(self):
        message = _message()

        await cmd_address(message)

        assert "Say /start" in _replies(message)[0]

    @pytest.mark.asyncio
    async def test_bridge_usage(self):
        message = _message()

        await cmd_bridge(message, _command("bridge", "BASE-SEPOLIA 0xabc"))

        assert _replies(message) == [USAGE]

    @pytest.mark.asyncio
    async def test_bridge_rejects_bad_address(self):
        message = _message()
        await cmd_start(message)

        await cmd_bridge(message, _command("bridge", "BASE-SEPOLIA 0x1234 5"))

        assert "0x followed by 40 hex" in _replies(message)[-1]

    @pytest.mark.asyncio
    async def test_deposit_requires_amount(self):
        message = _message()

        await cmd_deposit(message, _command("deposit"))

        assert "/deposit <amount>" in _replies(message)[0]

    @pytest.mark.asyncio
    async def test_deposit_rejects_bad_amount(self):
        message = _message()

        await cmd_deposit(message, _command("deposit", "-5"))

        assert "positive USDC amount" in _replies(message)[0]

    @pytest.mark.asyncio
    async def test_send_usage(self):
        message = _message()

        await cmd_send(message, _command("send", "0xabc"))

        assert _replies(message) == [SEND_USAGE]

    @pytest.mark.asyncio
    async def test_send_without_wallet(self):
        message = _message()

        await cmd_send(message, _command("send", f"{'0x' + 'ab' * 20} 5"))

        assert "Say /start" in _replies(message)[0]

    @pytest.mark.asyncio
    async def test_send_transfers_from_primary_wallet(self):
        message = _message()
        await cmd_start(message)
        wallet = await get_user_store().get_wallet(42, "ARC-TESTNET")
        recipient = "0x" + "ab" * 20

        await cmd_send(message, _command("send", f"{recipient} 12.5"))

        transfers = [
            tx for tx in get_wallet_gateway().transactions.values() if tx["kind"] == "transfer"
        ]
        assert transfers == [
            {
                "kind": "transfer",
                "wallet_id": wallet.wallet_id,
                "network": "ARC-TESTNET",
                "destination_address": recipient,
                "amount": "12.500000",
            }
        ]
        assert "Transaction ID: sim-tx-" in _replies(message)[-1]

    @pytest.mark.asyncio
    async def test_send_rejects_bad_address(self):
        message = _message()
        await cmd_start(message)

        await cmd_send(message, _command("send", "0x1234 5"))

        assert "0x followed by 40 hex" in _replies(message)[-1]
        assert get_wallet_gateway().transactions == {}

    @pytest.mark.asyncio
    async def test_send_rejects_bad_amount(self):
        message = _message()
        await cmd_start(message)

        await cmd_send(message, _command("send", f"{'0x' + 'ab' * 20} abc"))

        assert "positive USDC amount" in _replies(message)[-1]

    @pytest.mark.asyncio
    async def test_bridge_logs_state_on_provider_error(self, caplog):
        message = _message()
        await cmd_start(message)
        gateway = get_wallet_gateway()
        gateway.submit_contract_call = AsyncMock(side_effect=httpx.ConnectError("down"))

        with caplog.at_level("ERROR", logger="remifi.bot.handlers.bridge"):
            await cmd_bridge(message, _command("bridge", f"BASE-SEPOLIA {'0x' + 'ab' * 20} 5"))

        assert "unreachable" in _replies(message)[-1]
        assert "'step': 'approve'" in caplog.text


class TestRunner:
    """Bot construction."""

    @pytest.mark.asyncio
    async def test_create_bot_requires_token(self):
        with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
            await create_bot()

    @pytest.mark.asyncio
    async def test_create_bot_shares_notification_bot(self):
        shared = MagicMock()

        with patch("remifi.bot.bot.get_bot", new=AsyncMock(return_value=shared)):
            bot, dp = await create_bot()

        assert bot is shared
        assert len(dp.sub_routers) == 1
