"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from src.config import Settings, get_settings


class TestConfigurationSystem:
    """Test suite for configuration management."""

    def test_default_values(self):
        """Verify all configuration fields have sensible defaults."""
        get_settings.cache_clear()

        settings = Settings(_env_file=None)

        # Queue pacing per partner
        assert settings.flex_queue_delay_seconds == 2.0
        assert settings.credius_queue_delay_seconds == 5.0
        assert settings.bccreditrapid_queue_delay_seconds == 2.0
        assert settings.ifn_sms_queue_delay_seconds == 2.0

        # Queue limits
        assert settings.queue_max_pending == 500
        assert settings.queue_overflow_policy == "reject"
        assert settings.queue_handler_timeout_seconds == 120.0
        assert settings.queue_shutdown_timeout_seconds == 30.0

        # Integrations
        assert settings.monday_api_url == "https://api.monday.com/v2"
        assert settings.credius_default_county == "București"
        assert settings.fourpay_api_url == "https://sms.4pay.ro/smsapi/api.send_sms"

        # Logging
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False

    def test_environment_variable_override(self, monkeypatch):
        """Verify environment variables override defaults."""
        get_settings.cache_clear()

        monkeypatch.setenv("MONDAY_API_TOKEN", "monday-token")
        monkeypatch.setenv("CREDIUS_QUEUE_DELAY_SECONDS", "7.5")
        monkeypatch.setenv("QUEUE_OVERFLOW_POLICY", "drop_oldest")
        monkeypatch.setenv("SLACK_WEBHOOK_IFN_SMS", "https://hooks.slack.test/ifn")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = get_settings()

        assert settings.monday_api_token == "monday-token"
        assert settings.credius_queue_delay_seconds == 7.5
        assert settings.queue_overflow_policy == "drop_oldest"
        assert settings.slack_webhook_ifn_sms == "https://hooks.slack.test/ifn"
        assert settings.log_level == "DEBUG"
        assert settings.environment == "production"

        get_settings.cache_clear()

    def test_settings_singleton(self):
        """get_settings() returns the cached instance."""
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()

    def test_invalid_overflow_policy_rejected(self, monkeypatch):
        """Literal fields validate their values."""
        monkeypatch.setenv("QUEUE_OVERFLOW_POLICY", "block")

        with pytest.raises(ValueError):
            Settings(_env_file=None)
