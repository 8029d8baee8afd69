"""Tests for settings."""

from remifi.config import Settings, get_settings, reset_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.primary_network == "ARC-TESTNET"
        assert settings.deposit_network == "BASE-SEPOLIA"
        assert settings.attestation_poll_interval == 10.0
        assert settings.attestation_max_attempts == 30
        assert settings.tx_poll_interval == 2.0
        assert settings.iris_api_url == "https://iris-api-sandbox.circle.com"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ATTESTATION_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("PRIMARY_NETWORK", "ETH-SEPOLIA")
        reset_settings()

        settings = get_settings()

        assert settings.attestation_max_attempts == 5
        assert settings.primary_network == "ETH-SEPOLIA"

    def test_safe_dict_redacts_secrets(self):
        settings = Settings(
            circle_api_key="TEST_API_KEY:secret",
            circle_entity_secret="ab" * 32,
            supabase_key="service-key",
        )

        safe = settings.get_safe_dict()

        assert safe["circle"]["api_key"] == "***"
        assert safe["circle"]["entity_secret"] == "***"
        assert safe["supabase"]["key"] == "***"
        assert "TEST_API_KEY" not in str(safe)
        assert settings.has_circle_wallets
        assert not settings.has_store

    def test_cached(self):
        assert get_settings() is get_settings()
