"""Tests for settings normalization and configuration checks."""

from pathlib import Path

from oilbot.config import Settings, check_configuration


def make_settings(**kwargs):
    return Settings(_env_file=None, **kwargs)


class TestUrls:
    def test_base_url_normalized(self):
        settings = make_settings(base_url="\\https://shop.example/")
        assert settings.base_url == "https://shop.example"
        assert settings.public_base_url == "https://shop.example"

    def test_default_public_url(self):
        settings = make_settings(base_url=None, web_port=8080)
        assert settings.public_base_url == "http://localhost:8080"

    def test_webhook_url_normalized(self):
        assert make_settings(webhook_url="https://hook.example/").webhook_url == "https://hook.example"


class TestPaths:
    def test_defaults_under_data_dir(self, temp_dir):
        settings = make_settings(data_dir=temp_dir)
        assert settings.orders_path == temp_dir / "orders"
        assert settings.static_path == temp_dir / "static"
        assert settings.db_url == f"sqlite+aiosqlite:///{temp_dir / 'oilbot.db'}"

    def test_overrides(self):
        settings = make_settings(orders_dir=Path("/x/orders"), database_url="sqlite+aiosqlite:///:memory:")
        assert settings.orders_path == Path("/x/orders")
        assert settings.db_url == "sqlite+aiosqlite:///:memory:"


class TestArchiveSwitch:
    def test_enabled_outside_production(self):
        assert make_settings(environment="development").should_archive_orders

    def test_disabled_in_production(self):
        assert not make_settings(environment="Production").should_archive_orders

    def test_explicit_override(self):
        assert make_settings(environment="production", archive_orders=True).should_archive_orders


class TestCheckConfiguration:
    def test_missing_everything(self):
        warnings = check_configuration(make_settings(
            telegram_bot_token=None,
            razorpay_key_id=None,
            razorpay_key_secret=None,
            email_user=None,
            manager_chat_id=None,
        ))
        joined = "\n".join(warnings)
        assert "TELEGRAM_BOT_TOKEN" in joined
        assert "Razorpay" in joined
        assert "Email" in joined
        assert "MANAGER_CHAT_ID" in joined

    def test_fully_configured(self):
        warnings = check_configuration(make_settings(
            telegram_bot_token="123:abc",
            razorpay_key_id="rzp_test",
            razorpay_key_secret="secret",
            email_user="shop@example.com",
            email_app_password="app-pass",
            supplier_email="supplier@example.com",
            manager_chat_id=1001,
        ))
        assert warnings == []

    def test_upi_needs_upi_id(self):
        warnings = check_configuration(make_settings(payment_provider="upi", upi_id=None))
        assert any("UPI_ID" in w for w in warnings)
