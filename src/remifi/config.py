"""Application configuration using pydantic-settings.

Circle credentials, bridge polling policy and the networks used by the
deposit pipeline are all read from the environment (or a .env file).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Telegram
    # ======================
    telegram_bot_token: str = Field(default="", description="Telegram bot token from BotFather")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")
    dry_run: bool = Field(
        default=False, description="Use simulated wallet and on-ramp providers"
    )

    # ======================
    # Circle Web3 Services (developer-controlled wallets)
    # ======================
    circle_api_key: str = Field(default="", description="Circle W3S API key")
    circle_entity_secret: str = Field(
        default="", description="Hex encoded 32-byte entity secret"
    )
    circle_api_url: str = Field(
        default="https://api.circle.com/v1/w3s", description="Circle W3S API base URL"
    )
    circle_wallet_set_name: str = Field(
        default="RemiFi wallets", description="Name used when creating wallet sets"
    )

    # ======================
    # Circle Business Account (fiat on-ramp sandbox)
    # ======================
    circle_sandbox_api_key: str = Field(default="", description="Circle Business sandbox API key")
    circle_business_api_url: str = Field(
        default="https://api-sandbox.circle.com/v1",
        description="Circle Business Account API base URL",
    )

    # ======================
    # CCTP attestation service (Iris)
    # ======================
    iris_api_url: str = Field(
        default="https://iris-api-sandbox.circle.com",
        description="Circle Iris attestation API base URL",
    )

    # ======================
    # Supabase (user / wallet store)
    # ======================
    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_key: str = Field(default="", description="Supabase service key")

    # ======================
    # Networks
    # ======================
    primary_network: str = Field(
        default="ARC-TESTNET", description="Network holding the user's main wallet"
    )
    deposit_network: str = Field(
        default="BASE-SEPOLIA", description="Network the on-ramp pays out on"
    )

    # ======================
    # Bridge polling policy
    # ======================
    tx_poll_interval: float = Field(
        default=2.0, description="Seconds between transaction status polls"
    )
    tx_poll_max_attempts: int = Field(
        default=300, description="Transaction status poll ceiling (0 = unbounded)"
    )
    attestation_poll_interval: float = Field(
        default=10.0, description="Seconds between attestation polls"
    )
    attestation_max_attempts: int = Field(
        default=30, description="Attestation poll ceiling"
    )
    attestation_settle_delay: float = Field(
        default=2.0, description="Delay after burn confirmation before polling Iris"
    )

    # ======================
    # Deposit flow
    # ======================
    deposit_settle_delay: float = Field(
        default=5.0, description="Simulated bank / chain propagation delay"
    )
    faucet_url: str = Field(
        default="https://faucet.circle.com", description="Fallback USDC faucet"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_circle_wallets(self) -> bool:
        """Check if Circle W3S credentials are configured."""
        return bool(self.circle_api_key and self.circle_entity_secret)

    @property
    def has_store(self) -> bool:
        """Check if the Supabase store is configured."""
        return bool(self.supabase_url and self.supabase_key)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "telegram_bot_token": "***" if self.telegram_bot_token else "(not set)",
            "circle": {
                "api_url": self.circle_api_url,
                "api_key": "***" if self.circle_api_key else "(not set)",
                "entity_secret": "***" if self.circle_entity_secret else "(not set)",
                "business_api_url": self.circle_business_api_url,
                "sandbox_api_key": "***" if self.circle_sandbox_api_key else "(not set)",
                "iris_api_url": self.iris_api_url,
            },
            "supabase": {
                "url": self.supabase_url or "(not set)",
                "key": "***" if self.supabase_key else "(not set)",
            },
            "networks": {
                "primary": self.primary_network,
                "deposit": self.deposit_network,
            },
            "polling": {
                "tx_interval": self.tx_poll_interval,
                "tx_max_attempts": self.tx_poll_max_attempts,
                "attestation_interval": self.attestation_poll_interval,
                "attestation_max_attempts": self.attestation_max_attempts,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings (useful for testing)."""
    get_settings.cache_clear()
