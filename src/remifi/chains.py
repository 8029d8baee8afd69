"""CCTP V2 chain configuration registry.

Maps a Circle network identifier (e.g. ``BASE-SEPOLIA``) to the USDC,
TokenMessengerV2 and MessageTransmitterV2 contract addresses and the CCTP
domain id. The registry is immutable and validated when it is built, so a
missing field surfaces at startup rather than halfway through a transfer.

Reference: https://developers.circle.com/cctp/evm-smart-contracts
"""

from dataclasses import dataclass, fields
from functools import lru_cache
from types import MappingProxyType
from typing import Iterator, Mapping

from remifi.exceptions import ConfigurationError

# CCTP V2 testnet contracts share one address across EVM chains
TOKEN_MESSENGER_V2_TESTNET = "0x8FE6B999Dc680CcFDD5Bf7EB0974218be2542DAA"
MESSAGE_TRANSMITTER_V2_TESTNET = "0xE737e5cEBEEBa77EFE34D4aa090756590b1CE275"


@dataclass(frozen=True)
class ChainConfig:
    """Bridge contracts and domain id for one network."""

    network: str
    usdc_address: str
    token_messenger_address: str
    message_transmitter_address: str
    domain_id: int


# ======================
# Chain Configurations
# ======================

CHAINS: dict[str, ChainConfig] = {
    "ETH-SEPOLIA": ChainConfig(
        network="ETH-SEPOLIA",
        usdc_address="0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=0,
    ),
    "AVAX-FUJI": ChainConfig(
        network="AVAX-FUJI",
        usdc_address="0x5425890298aed601595a70AB815c96711a31Bc65",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=1,
    ),
    "OP-SEPOLIA": ChainConfig(
        network="OP-SEPOLIA",
        usdc_address="0x5fd84259d66Cd46123540766Be93DFE6D43130D7",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=2,
    ),
    "ARB-SEPOLIA": ChainConfig(
        network="ARB-SEPOLIA",
        usdc_address="0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=3,
    ),
    "BASE-SEPOLIA": ChainConfig(
        network="BASE-SEPOLIA",
        usdc_address="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=6,
    ),
    "MATIC-AMOY": ChainConfig(
        network="MATIC-AMOY",
        usdc_address="0x41E94Eb019C0762f9Bfcf9Fb1E58725BfB0e7582",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=7,
    ),
    "ARC-TESTNET": ChainConfig(
        network="ARC-TESTNET",
        usdc_address="0x3600000000000000000000000000000000000000",
        token_messenger_address=TOKEN_MESSENGER_V2_TESTNET,
        message_transmitter_address=MESSAGE_TRANSMITTER_V2_TESTNET,
        domain_id=26,
    ),
}


def validate_chain_config(config: ChainConfig) -> None:
    """Raise ConfigurationError if any field of the entry is missing."""
    for f in fields(config):
        value = getattr(config, f.name)
        if f.name == "domain_id":
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(
                    f"Chain {config.network!r} has invalid domain id {value!r}"
                )
        elif not value:
            raise ConfigurationError(f"Chain {config.network!r} is missing {f.name}")


class ChainRegistry:
    """Read-only, validated view over chain configurations."""

    def __init__(self, chains: Mapping[str, ChainConfig]):
        for network, config in chains.items():
            validate_chain_config(config)
            if config.network != network:
                raise ConfigurationError(
                    f"Chain entry {network!r} is registered as {config.network!r}"
                )
        self._chains = MappingProxyType(dict(chains))

    def get(self, network: str) -> ChainConfig:
        """Get configuration for a network.

        Raises:
            ConfigurationError: If the network is not supported
        """
        config = self._chains.get(network.upper())
        if config is None:
            raise ConfigurationError(f"Network {network!r} has no bridge configuration")
        return config

    def domain_id(self, network: str) -> int:
        """Get the CCTP domain id for a network."""
        return self.get(network).domain_id

    def networks(self) -> list[str]:
        """List of supported network identifiers."""
        return list(self._chains)

    def __contains__(self, network: object) -> bool:
        return isinstance(network, str) and network.upper() in self._chains

    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)


@lru_cache
def get_chain_registry() -> ChainRegistry:
    """Get the validated registry of built-in chains."""
    return ChainRegistry(CHAINS)
