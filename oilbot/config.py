"""
Configuration management for OilFacts Bot.
Loads settings from environment variables with validation.
"""

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = Path(__file__).parent.parent / "data"

    # Telegram
    telegram_bot_token: Optional[str] = Field(
        default=None, description="Telegram Bot API token"
    )

    # Web server (pay page, static QR images, webhook)
    base_url: Optional[str] = Field(
        default=None, description="Public URL used in pay links"
    )
    web_enabled: bool = Field(default=True, description="Serve pay pages over HTTP")
    web_host: str = Field(default="0.0.0.0", description="Web server host")
    web_port: int = Field(default=3000, description="Web server port")

    # Webhook mode (polling when webhook_url is empty)
    webhook_url: Optional[str] = Field(
        default=None, description="Public URL Telegram should post updates to"
    )
    webhook_path: str = Field(default="/webhook", description="Path of the update endpoint")
    webhook_secret: Optional[str] = Field(
        default=None, description="Shared secret checked on every webhook call"
    )

    # Payments
    payment_provider: Literal["razorpay", "upi"] = Field(
        default="razorpay", description="Payment gateway to use"
    )
    razorpay_key_id: Optional[str] = Field(default=None, description="Razorpay key id")
    razorpay_key_secret: Optional[str] = Field(default=None, description="Razorpay key secret")
    upi_id: Optional[str] = Field(default=None, description="UPI VPA for QR payments")
    merchant_name: str = Field(default="OilFacts", description="Payee name shown to customers")
    currency: str = Field(default="INR", description="Order currency")

    # Fulfillment notifications
    manager_chat_id: Optional[int] = Field(
        default=None, description="Telegram chat that receives completed orders"
    )
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server")
    smtp_port: int = Field(default=465, description="SMTP port (465 = SSL, else STARTTLS)")
    email_user: Optional[str] = Field(default=None, description="SMTP login and sender")
    email_app_password: Optional[str] = Field(default=None, description="SMTP app password")
    supplier_email: Optional[str] = Field(default=None, description="Recipient of order emails")
    support_email: str = Field(default="support@oilfacts.com", description="Shown in HELP")

    # Sessions
    session_backend: Literal["memory", "sql"] = Field(
        default="memory", description="Where conversation sessions live"
    )
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL for the sql session backend",
    )
    session_idle_timeout: Optional[int] = Field(
        default=None, description="Seconds of inactivity before a session is dropped (off when empty)"
    )
    session_reap_interval: int = Field(
        default=300, description="Seconds between idle session sweeps"
    )

    # Catalog and storage
    catalog_path: Optional[Path] = Field(
        default=None, description="JSON catalog overriding the built-in oil list"
    )
    orders_dir: Optional[Path] = Field(default=None, description="Completed order archive")
    static_dir: Optional[Path] = Field(default=None, description="Generated QR images")
    archive_orders: Optional[bool] = Field(
        default=None, description="Write completed orders to JSON (default: outside production)"
    )

    environment: str = Field(default="development", description="development or production")

    # Debug
    debug: bool = Field(default=False, description="Debug mode")

    @field_validator("base_url", "webhook_url")
    @classmethod
    def _strip_url(cls, value: Optional[str]) -> Optional[str]:
        """Drop a stray leading backslash and the trailing slash."""
        if value is None:
            return None
        value = value.strip().lstrip("\\").rstrip("/")
        return value or None

    @property
    def public_base_url(self) -> str:
        """Base URL for pay links and QR images."""
        return self.base_url or f"http://localhost:{self.web_port}"

    @property
    def db_url(self) -> str:
        """Get database URL with absolute path."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'oilbot.db'}"

    @property
    def orders_path(self) -> Path:
        """Directory for archived and exported orders."""
        return self.orders_dir or self.data_dir / "orders"

    @property
    def static_path(self) -> Path:
        """Directory served under /static/."""
        return self.static_dir or self.data_dir / "static"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def should_archive_orders(self) -> bool:
        if self.archive_orders is not None:
            return self.archive_orders
        return not self.is_production

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_app_password and self.supplier_email)


def check_configuration(config: Settings) -> list[str]:
    """
    Log a warning for every missing credential group.
    The bot keeps running with the affected feature degraded.
    """
    warnings = []

    if not config.telegram_bot_token:
        warnings.append("TELEGRAM_BOT_TOKEN is missing. Messages cannot be sent.")

    if config.payment_provider == "razorpay" and not (
        config.razorpay_key_id and config.razorpay_key_secret
    ):
        warnings.append(
            "Razorpay is not configured (RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET). "
            "Customers will get a payment error on confirm."
        )
    if config.payment_provider == "upi" and not config.upi_id:
        warnings.append("UPI_ID is not set. Customers will get a payment error on confirm.")

    if not config.email_configured:
        warnings.append(
            "Email is not configured (EMAIL_USER / EMAIL_APP_PASSWORD / SUPPLIER_EMAIL). "
            "Orders will not be emailed."
        )

    if config.manager_chat_id is None:
        warnings.append("MANAGER_CHAT_ID is not set. Orders will not be sent to Telegram.")

    if config.webhook_url and not config.webhook_secret:
        warnings.append("WEBHOOK_SECRET is not set. Webhook calls are not verified.")

    for warning in warnings:
        logger.warning(warning)

    return warnings


# Global settings instance
settings = Settings()
