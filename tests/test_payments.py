"""Tests for payment gateways and UPI QR codes."""

import asyncio
from decimal import Decimal

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from oilbot.core.catalog import Catalog
from oilbot.core.orders import OrderLineItem, Session
from oilbot.errors import AuthExpired, ConfigurationError, TransientFailure
from oilbot.integrations.payments import RazorpayGateway, UpiGateway, get_payment_gateway, to_minor_units
from oilbot.integrations.qr import QrGenerator, build_upi_uri


def make_session():
    return Session(
        customer_id="42",
        selected_items=[OrderLineItem(Catalog.default().find_by_id(2), Decimal("1.5"))],
        order_id="OIL-000777",
        total=Decimal("210.0"),
        payment_order_id="order_777",
    )


class TestMinorUnits:
    @pytest.mark.parametrize("amount, expected", [
        (Decimal("480"), 48000),
        (Decimal("240.5"), 24050),
        (Decimal("0.125"), 13),
    ])
    def test_paise(self, amount, expected):
        assert to_minor_units(amount) == expected


class TestUpi:
    def test_uri(self):
        uri = build_upi_uri("shop@upi", "Oil Facts", Decimal("210"), "OIL-1")
        assert uri == "upi://pay?pa=shop@upi&pn=Oil%20Facts&am=210.00&cu=INR&tn=Order%20OIL-1"

    def test_create_order(self, temp_dir):
        gateway = UpiGateway(QrGenerator(temp_dir, "https://shop.example"), upi_id="shop@upi")
        order_id = asyncio.run(gateway.create_order(Decimal("210"), "INR", "OIL-000777"))
        assert order_id == "upi_OIL-000777"

    def test_create_order_without_upi_id(self, temp_dir):
        gateway = UpiGateway(QrGenerator(temp_dir, "https://shop.example"), upi_id="x")
        gateway.upi_id = None
        with pytest.raises(ConfigurationError):
            asyncio.run(gateway.create_order(Decimal("210"), "INR", "OIL-1"))

    def test_pay_page_renders_qr(self, temp_dir):
        gateway = UpiGateway(QrGenerator(temp_dir, "https://shop.example"), upi_id="shop@upi")
        html = asyncio.run(gateway.render_pay_page(make_session()))

        assert (temp_dir / "qr_OIL-000777.png").exists()
        assert "https://shop.example/static/qr_OIL-000777.png" in html
        assert "Mustard Oil" in html
        assert "₹210" in html


def razorpay_stub(status, body):
    """Local stand-in for the Razorpay orders endpoint."""
    received = []

    async def create_order(request):
        received.append((request.headers.get("Authorization"), await request.json()))
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_post("/v1/orders", create_order)
    return app, received


def call_razorpay(status, body, **gateway_kwargs):
    app, received = razorpay_stub(status, body)

    async def _run():
        async with TestServer(app) as server:
            gateway = RazorpayGateway(key_id="rzp_test", key_secret="secret", **gateway_kwargs)
            gateway.ORDERS_URL = str(server.make_url("/v1/orders"))
            return await gateway.create_order(
                Decimal("480"), "INR", "OIL-000001", {"customer": "42"}
            )

    return asyncio.run(_run()), received


class TestRazorpay:
    def test_create_order(self):
        order_id, received = call_razorpay(200, {"id": "order_Razor1", "status": "created"})

        assert order_id == "order_Razor1"
        [(auth, payload)] = received
        assert auth.startswith("Basic ")
        assert payload == {
            "amount": 48000,
            "currency": "INR",
            "receipt": "OIL-000001",
            "notes": {"customer": "42"},
        }

    def test_unauthorized(self):
        with pytest.raises(AuthExpired):
            call_razorpay(401, {"error": {"code": "BAD_REQUEST_ERROR"}})

    def test_server_error(self):
        with pytest.raises(TransientFailure):
            call_razorpay(500, {"error": "down"})

    def test_missing_credentials(self):
        gateway = RazorpayGateway(key_id="k", key_secret="s")
        gateway.key_id = None
        with pytest.raises(ConfigurationError):
            asyncio.run(gateway.create_order(Decimal("1"), "INR", "OIL-1"))

    def test_pay_page(self):
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="secret", merchant_name="OilFacts")
        html = asyncio.run(gateway.render_pay_page(make_session()))

        assert "checkout.razorpay.com" in html
        assert '"amount": 21000' in html
        assert '"order_id": "order_777"' in html
        assert '"currency": "INR"' in html

    def test_pay_page_uses_configured_currency(self):
        gateway = RazorpayGateway(
            key_id="rzp_test", key_secret="secret", merchant_name="OilFacts", currency="USD"
        )
        html = asyncio.run(gateway.render_pay_page(make_session()))

        assert '"currency": "USD"' in html
        assert "INR" not in html


class TestFactory:
    def test_known_providers(self):
        assert get_payment_gateway("razorpay").name == "razorpay"
        assert get_payment_gateway("upi").name == "upi"

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_payment_gateway("paypal")
