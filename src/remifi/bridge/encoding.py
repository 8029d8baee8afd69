"""USDC amount and CCTP recipient encoding helpers."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Union

from eth_utils import is_address, to_checksum_address

from remifi.exceptions import InvalidAddressError, InvalidAmountError

#: USDC minor-unit precision
USDC_DECIMALS = 6
USDC_SCALE = 10**USDC_DECIMALS

#: Proportional fee ceiling passed to depositForBurn: max_fee = amount // 5000
MAX_FEE_DIVISOR = 5000

#: minFinalityThreshold for depositForBurn; 1000 selects the fast transfer tier
FINALITY_THRESHOLD_FAST = 1000

#: destinationCaller placeholder, any address may relay the mint
ZERO_BYTES32 = "0x" + "00" * 32

_PAD_PREFIX = "0" * 24

AmountLike = Union[Decimal, str, int]


def parse_amount(amount: AmountLike) -> Decimal:
    """Parse a positive USDC amount, truncating past 6 decimal places.

    Raises:
        InvalidAmountError: If the amount is not a positive number, or
            truncates to zero
    """
    try:
        value = Decimal(str(amount).strip())
        if not value.is_finite():
            raise InvalidAmountError(f"Amount must be a finite number, got {amount!r}")
        truncated = value.quantize(Decimal(1).scaleb(-USDC_DECIMALS), rounding=ROUND_DOWN)
    except InvalidOperation:
        raise InvalidAmountError(f"Amount is not a valid number: {amount!r}")

    if truncated <= 0:
        raise InvalidAmountError(f"Amount must be at least 0.000001 USDC, got {amount!r}")
    return truncated


def to_base_units(amount: AmountLike) -> int:
    """Convert a USDC amount to integer base units (amount * 10^6).

    Example:
        >>> to_base_units("25.00")
        25000000
    """
    return int(parse_amount(amount) * USDC_SCALE)


def from_base_units(units: int) -> Decimal:
    """Convert integer base units back to a USDC amount."""
    return Decimal(units) / USDC_SCALE


def compute_max_fee(base_units: int) -> int:
    """Fee ceiling for depositForBurn, truncating integer division."""
    if base_units < 0:
        raise InvalidAmountError(f"Base units must be >= 0, got {base_units}")
    return base_units // MAX_FEE_DIVISOR


def _strip_hex(value: str) -> str:
    value = value.strip()
    return value[2:] if value[:2].lower() == "0x" else value


def is_evm_address(address: str) -> bool:
    """Check for a well-formed 20-byte hex address (checksum verified if mixed case)."""
    return isinstance(address, str) and is_address(address.strip())


def address_to_bytes32(address: str) -> str:
    """Left-pad an EVM address to the 32-byte CCTP recipient encoding.

    Already padded values are returned unchanged (normalized to lower case).

    Raises:
        InvalidAddressError: If the value is not a valid address
    """
    raw = _strip_hex(address)
    if len(raw) == 64 and raw.startswith(_PAD_PREFIX):
        raw = raw[24:]

    if len(raw) != 40 or not is_evm_address(f"0x{raw}"):
        raise InvalidAddressError(f"Not a valid EVM address: {address!r}")

    return "0x" + _PAD_PREFIX + raw.lower()


def bytes32_to_address(value: str) -> str:
    """Extract the checksummed address from a 32-byte recipient value."""
    raw = _strip_hex(value)
    if len(raw) != 64 or not raw.startswith(_PAD_PREFIX) or not is_address(f"0x{raw[24:].lower()}"):
        raise InvalidAddressError(f"Not a padded address: {value!r}")
    return to_checksum_address(f"0x{raw[24:]}")
