"""
Fulfillment notifications by email (SMTP).
"""

import asyncio
import logging
import smtplib
from datetime import datetime
from decimal import Decimal
from email.message import EmailMessage
from html import escape
from typing import Optional

from oilbot.core.catalog import format_amount
from oilbot.core.orders.models import CompletedOrder
from oilbot.errors import AuthExpired, TransientFailure
from oilbot.integrations.notify.base import Notifier

logger = logging.getLogger(__name__)


def _wrap(title: str, body: str) -> str:
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: #4CAF50; color: white; padding: 10px; text-align: center;">
    <h2>{title}</h2>
  </div>
  {body}
  <div style="background-color: #f1f1f1; padding: 10px; text-align: center; font-size: 12px;">
    <p>This is an automated message from OilFacts Order System.</p>
  </div>
</div>
"""


def order_email_html(order: CompletedOrder) -> str:
    items = "".join(
        f"<li>{escape(line.item.name)} - {format_amount(line.quantity)}L × "
        f"₹{format_amount(line.item.unit_price)} = ₹{format_amount(line.subtotal)}</li>"
        for line in order.items
    )
    warning = (
        '<p style="color: red; font-weight: bold;">⚠️ PAYMENT NEEDS VERIFICATION</p>'
        if order.needs_verification else ""
    )
    body = f"""
  <p>Dear Supplier,</p>
  <p>A new order has been placed and payment has been received.</p>
  <div style="margin: 20px 0; padding: 15px; background-color: #f9f9f9;">
    <h3>Order Information:</h3>
    <p><strong>Order ID:</strong> {escape(order.order_id)}</p>
    <p><strong>Customer:</strong> {escape(order.customer_id)}</p>
    <p><strong>Order Date:</strong> {order.completed_at.strftime('%d.%m.%Y %H:%M')}</p>
    <p><strong>Payment Reference:</strong> {escape(order.payment_reference or 'Not provided')}</p>
    <p><strong>Payment Status:</strong> {order.payment_status.value if order.payment_status else 'Unknown'}</p>
    {warning}
    <h3>Delivery Address:</h3>
    <p>{escape(order.address)}</p>
    <h3>Order Items:</h3>
    <ul>{items}</ul>
    <p style="font-size: 18px; font-weight: bold; text-align: right;">Total: ₹{format_amount(order.total)}</p>
  </div>
  <p>Please process this order as soon as possible.</p>
"""
    return _wrap(f"🛒 Order Confirmation #{escape(order.order_id)}", body)


def payment_proof_email_html(order_id: str, customer_id: str, amount: Decimal, has_image: bool) -> str:
    attachment_note = (
        "The payment screenshot is attached to this email."
        if has_image else "⚠️ The screenshot could not be downloaded."
    )
    body = f"""
  <p>Dear Admin,</p>
  <p>A payment screenshot has been received for verification.</p>
  <div style="margin: 20px 0; padding: 15px; background-color: #f9f9f9;">
    <h3>Payment Information:</h3>
    <p><strong>Order ID:</strong> {escape(order_id)}</p>
    <p><strong>Customer:</strong> {escape(customer_id)}</p>
    <p><strong>Amount:</strong> ₹{format_amount(amount)}</p>
    <p><strong>Time:</strong> {datetime.now().strftime('%d.%m.%Y %H:%M')}</p>
    <h3>Payment Screenshot:</h3>
    <p>{attachment_note}</p>
  </div>
  <p>Please verify this payment and process the order accordingly.</p>
"""
    return _wrap("💳 Payment Screenshot Received", body)


class EmailNotifier(Notifier):
    """Send HTML emails to the supplier through SMTP."""

    SERVICE = "smtp"

    def __init__(self, host: str, port: int, user: str, password: str, recipient: str, timeout: float = 30):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.recipient = recipient
        self.timeout = timeout

    def build_message(self, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.user
        message["To"] = self.recipient
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        """Blocking SMTP delivery."""
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.login(self.user, self.password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.user, self.password)
                smtp.send_message(message)

    async def _send(self, message: EmailMessage) -> None:
        try:
            await asyncio.to_thread(self._deliver, message)
        except smtplib.SMTPAuthenticationError as e:
            raise AuthExpired(self.SERVICE, "SMTP login rejected. Check EMAIL_USER / EMAIL_APP_PASSWORD.") from e
        except (smtplib.SMTPException, OSError) as e:
            raise TransientFailure(self.SERVICE, str(e)) from e

    async def send_order_notification(self, order: CompletedOrder) -> None:
        message = self.build_message(
            f"🛒 New Order #{order.order_id} - ₹{format_amount(order.total)}",
            order_email_html(order),
        )
        await self._send(message)
        logger.info(f"Email sent to supplier for order {order.order_id}")

    async def send_payment_proof(
        self,
        order_id: str,
        customer_id: str,
        amount: Decimal,
        image: Optional[bytes],
    ) -> None:
        message = self.build_message(
            f"💳 Payment Screenshot for Order #{order_id} - ₹{format_amount(amount)}",
            payment_proof_email_html(order_id, customer_id, amount, image is not None),
        )
        if image is not None:
            message.add_attachment(
                image,
                maintype="image",
                subtype="jpeg",
                filename=f"payment-screenshot-{order_id}.jpg",
            )
        await self._send(message)
        logger.info(f"Payment screenshot notification sent for order {order_id}")

    @property
    def name(self) -> str:
        return "email"
