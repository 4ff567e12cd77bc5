"""
Centralized Configuration System
Environment-aware settings for the Monday webhook relay and partner integrations.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.
    """

    # ============================================
    # MONDAY (upstream board)
    # ============================================
    monday_api_url: str = "https://api.monday.com/v2"
    monday_api_token: Optional[str] = None
    monday_timeout_seconds: float = 30.0

    # ============================================
    # SLACK NOTIFICATIONS (one channel per partner)
    # ============================================
    slack_webhook_flex: Optional[str] = None
    slack_webhook_credius: Optional[str] = None
    slack_webhook_bccreditrapid: Optional[str] = None
    slack_webhook_ifn_sms: Optional[str] = None
    slack_webhook_creditfix: Optional[str] = None
    slack_webhook_icredit: Optional[str] = None
    slack_webhook_flexcredit: Optional[str] = None
    slack_timeout_seconds: float = 10.0

    # ============================================
    # FLEX (Mediatel)
    # ============================================
    flex_api_url: Optional[str] = None
    flex_auth_token: Optional[str] = None
    flex_campaign: Optional[str] = None
    flex_source: Optional[str] = None
    flex_timeout_seconds: float = 20.0

    # ============================================
    # CREDIUS
    # ============================================
    credius_url: Optional[str] = None
    credius_username: Optional[str] = None
    credius_api_key: Optional[str] = None
    credius_default_county: str = "București"
    credius_timeout_seconds: float = 30.0  # Credius API is very slow

    # ============================================
    # BC CREDIT RAPID (ADSY API v2)
    # ============================================
    bccreditrapid_api_url: str = "https://formular-dev.adsy.ro/api/v2/leads/bulk"
    bccreditrapid_website_secret: Optional[str] = None
    bccreditrapid_website_code: Optional[str] = None
    bccreditrapid_timeout_seconds: float = 30.0

    # ============================================
    # 4PAY SMS GATEWAY (IFN-SMS)
    # ============================================
    fourpay_api_url: str = "https://sms.4pay.ro/smsapi/api.send_sms"
    fourpay_serv_id: Optional[str] = None
    fourpay_password: Optional[str] = None
    fourpay_timeout_seconds: float = 30.0
    ifn_sms_link_url: str = "https://fidem.ro/pr/"

    # ============================================
    # CREDITFIX (affiliate API v2)
    # ============================================
    creditfix_api_url: str = "https://account.creditfix.ro/api/v2/affapi"
    creditfix_aff_id: Optional[str] = None
    creditfix_username: Optional[str] = None
    creditfix_password: Optional[str] = None
    creditfix_timeout_seconds: float = 20.0

    # ============================================
    # ICREDIT
    # ============================================
    icredit_api_url: str = "https://icredit.ro/api/affiliates/application/create"
    icredit_auth_token: Optional[str] = None
    icredit_timeout_seconds: float = 20.0

    # ============================================
    # FLEXCREDIT
    # ============================================
    flexcredit_api_url: Optional[str] = None
    flexcredit_api_key: Optional[str] = None
    flexcredit_callback_url: Optional[str] = None
    flexcredit_product_id: int = 52
    flexcredit_default_amount: int = 5000  # RON, when the board has no amount
    flexcredit_installments: int = 5
    flexcredit_timeout_seconds: float = 30.0

    # ============================================
    # DELIVERY QUEUES
    # ============================================
    flex_queue_delay_seconds: float = 2.0
    credius_queue_delay_seconds: float = 5.0  # Slowest partner API
    bccreditrapid_queue_delay_seconds: float = 2.0
    ifn_sms_queue_delay_seconds: float = 2.0
    creditfix_queue_delay_seconds: float = 2.0
    icredit_queue_delay_seconds: float = 2.0
    flexcredit_queue_delay_seconds: float = 2.0
    queue_max_pending: Optional[int] = 500  # None disables the ceiling
    queue_overflow_policy: Literal["reject", "drop_oldest"] = "reject"
    queue_handler_timeout_seconds: Optional[float] = 120.0
    queue_shutdown_timeout_seconds: float = 30.0

    # ============================================
    # LOGGING
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "staging", "production", "test"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()


# Convenience accessor for common use
settings = get_settings()
