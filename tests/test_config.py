"""
Tests for application configuration.

Covers defaults, list parsing, and fail-fast validation.
"""

import pytest

from receipt_validator.config import ConfigurationError, Settings, get_settings, settings


class TestSettingsDefaults:
    """Tests for default settings values."""

    def test_apple_endpoints(self):
        """Default endpoints point at Apple's verifyReceipt hosts."""
        config = Settings()
        assert config.apple_production_url == "https://buy.itunes.apple.com/verifyReceipt"
        assert config.apple_sandbox_url == "https://sandbox.itunes.apple.com/verifyReceipt"

    def test_sandbox_retry_status(self):
        """Default sandbox sentinel is 21007."""
        assert Settings().apple_sandbox_retry_status == 21007

    def test_shared_secret_empty(self):
        """No shared secret is sent by default."""
        assert Settings().apple_shared_secret == ""

    def test_lifetime_products(self):
        """Default exact IDs and keyword."""
        config = Settings()
        assert config.lifetime_product_id_list == [
            "com.luiz.PandaApp.lifetime",
            "com.luiz.PandaApp.lifetime.v2",
        ]
        assert config.lifetime_keyword == "lifetime"

    def test_get_settings_returns_global(self):
        """get_settings returns the module-level instance."""
        assert get_settings() is settings


class TestSettingsFromEnvironment:
    """Tests for environment variable loading."""

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("APPLE_SANDBOX_RETRY_STATUS", "21008")
        monkeypatch.setenv("APPLE_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("LIFETIME_KEYWORD", "forever")

        config = Settings()

        assert config.apple_sandbox_retry_status == 21008
        assert config.apple_request_timeout == 2.5
        assert config.lifetime_keyword == "forever"

    def test_env_is_case_insensitive(self, monkeypatch: pytest.MonkeyPatch):
        """Lowercase variable names are accepted."""
        monkeypatch.setenv("apple_shared_secret", "abc123")
        assert Settings().apple_shared_secret == "abc123"


class TestLifetimeProductIdList:
    """Tests for comma-separated product ID parsing."""

    def test_strips_whitespace(self):
        """Whitespace around IDs is removed."""
        config = Settings(lifetime_product_ids=" com.a.lifetime , com.b.lifetime ")
        assert config.lifetime_product_id_list == ["com.a.lifetime", "com.b.lifetime"]

    def test_drops_empty_and_duplicates(self):
        """Empty entries and duplicates are dropped."""
        config = Settings(lifetime_product_ids="com.a.lifetime,,com.a.lifetime,")
        assert config.lifetime_product_id_list == ["com.a.lifetime"]

    def test_empty_list_with_keyword(self):
        """Keyword-only policy is allowed."""
        config = Settings(lifetime_product_ids="")
        assert config.lifetime_product_id_list == []


class TestFailFastValidation:
    """Tests for critical configuration validation."""

    def test_invalid_production_url(self):
        """Non-HTTP production URL fails startup."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(apple_production_url="ftp://buy.itunes.apple.com")
        assert "APPLE_PRODUCTION_URL" in str(exc_info.value)

    def test_invalid_sandbox_url(self):
        """Empty sandbox URL fails startup."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(apple_sandbox_url="")
        assert "APPLE_SANDBOX_URL" in str(exc_info.value)

    def test_non_positive_timeout(self):
        """Zero timeout fails startup."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(apple_request_timeout=0)
        assert "APPLE_REQUEST_TIMEOUT" in str(exc_info.value)

    def test_policy_that_never_matches(self):
        """No exact IDs and no keyword fails startup."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(lifetime_product_ids=" , ", lifetime_keyword="")
        assert "LIFETIME_PRODUCT_IDS" in str(exc_info.value)

    def test_reports_all_errors(self):
        """All problems are reported together."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(apple_production_url="nope", apple_request_timeout=-1)
        message = str(exc_info.value)
        assert "APPLE_PRODUCTION_URL" in message
        assert "APPLE_REQUEST_TIMEOUT" in message
