"""
Razorpay payment gateway.
Talks to the Orders REST API directly; checkout happens in Razorpay's hosted widget.
"""

import asyncio
import logging
from decimal import Decimal

import aiohttp

from oilbot.config import settings
from oilbot.core.orders.models import Session
from oilbot.errors import AuthExpired, ConfigurationError, TransientFailure
from oilbot.integrations.payments.base import PaymentGateway, to_minor_units
from oilbot.web import pages

logger = logging.getLogger(__name__)


class RazorpayGateway(PaymentGateway):
    """Razorpay provider."""

    ORDERS_URL = "https://api.razorpay.com/v1/orders"
    SERVICE = "razorpay.orders"

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        merchant_name: str | None = None,
        currency: str | None = None,
        timeout: float = 15,
    ):
        self.key_id = key_id or settings.razorpay_key_id
        self.key_secret = key_secret or settings.razorpay_key_secret
        self.merchant_name = merchant_name or settings.merchant_name
        self.currency = currency or settings.currency
        self.timeout = timeout

    def _check_credentials(self) -> None:
        if not (self.key_id and self.key_secret):
            raise ConfigurationError(
                "Razorpay credentials not provided. "
                "Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET in .env file."
            )

    async def create_order(
        self,
        amount: Decimal,
        currency: str,
        receipt_id: str,
        notes: dict | None = None,
    ) -> str:
        """Create Razorpay order, amount sent in paise."""
        self._check_credentials()

        payload = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt_id,
            "notes": notes or {},
        }

        try:
            async with aiohttp.ClientSession(
                auth=aiohttp.BasicAuth(self.key_id, self.key_secret),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as http:
                async with http.post(self.ORDERS_URL, json=payload) as response:
                    data = await response.json(content_type=None)
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransientFailure(self.SERVICE, str(e) or type(e).__name__) from e

        if status == 401:
            raise AuthExpired(self.SERVICE, "Razorpay rejected the API keys")
        if status >= 400 or not isinstance(data, dict) or "id" not in data:
            raise TransientFailure(self.SERVICE, f"HTTP {status}: {data}")

        logger.info(f"Razorpay order created: {data['id']} for ₹{amount}")
        return data["id"]

    async def render_pay_page(self, session: Session) -> str:
        return pages.razorpay_pay_page(
            session,
            key_id=self.key_id or "",
            merchant_name=self.merchant_name,
            amount_minor=to_minor_units(session.total),
            currency=self.currency,
        )

    @property
    def name(self) -> str:
        return "razorpay"
