"""
Direct UPI payment: no provider account, the pay page shows a UPI QR code.
"""

import asyncio
import logging
from decimal import Decimal

from oilbot.config import settings
from oilbot.core.orders.models import Session
from oilbot.errors import ConfigurationError
from oilbot.integrations.payments.base import PaymentGateway
from oilbot.integrations.qr import QrGenerator, build_upi_uri
from oilbot.web import pages

logger = logging.getLogger(__name__)


class UpiGateway(PaymentGateway):
    """UPI QR provider."""

    def __init__(
        self,
        qr_generator: QrGenerator,
        upi_id: str | None = None,
        merchant_name: str | None = None,
        currency: str | None = None,
    ):
        self.qr_generator = qr_generator
        self.upi_id = upi_id or settings.upi_id
        self.merchant_name = merchant_name or settings.merchant_name
        self.currency = currency or settings.currency

    async def create_order(
        self,
        amount: Decimal,
        currency: str,
        receipt_id: str,
        notes: dict | None = None,
    ) -> str:
        if not self.upi_id:
            raise ConfigurationError("UPI_ID not provided. Set UPI_ID in .env file.")
        logger.info(f"UPI payment prepared for {receipt_id}: ₹{amount}")
        return f"upi_{receipt_id}"

    async def render_pay_page(self, session: Session) -> str:
        uri = build_upi_uri(
            self.upi_id or "",
            self.merchant_name,
            session.total,
            session.order_id,
            currency=self.currency,
        )
        qr_url = await asyncio.to_thread(self.qr_generator.render, uri, f"qr_{session.order_id}")
        return pages.upi_pay_page(session, qr_url=qr_url, upi_uri=uri, merchant_name=self.merchant_name)

    @property
    def name(self) -> str:
        return "upi"
