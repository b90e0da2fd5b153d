"""
Fulfillment notifications to the manager's Telegram chat.
"""

import asyncio
import logging
from decimal import Decimal
from html import escape
from pathlib import Path
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BufferedInputFile, FSInputFile

from oilbot.core.catalog import format_amount
from oilbot.core.orders.exporter import OrderExporter, order_exporter
from oilbot.core.orders.models import CompletedOrder
from oilbot.errors import TransientFailure
from oilbot.integrations.notify.base import Notifier
from oilbot.integrations.telegram import translate_telegram_error

logger = logging.getLogger(__name__)


def format_manager_summary(order: CompletedOrder) -> str:
    lines = [
        f"🔔 <b>New order #{order.order_id}</b>",
        f"📅 {order.completed_at.strftime('%d.%m.%Y %H:%M')}",
        "",
        "<b>Items:</b>",
        order.format_items_summary(),
        "",
        f"<b>Total:</b> ₹{format_amount(order.total)}",
        "",
        f"👤 Customer: {escape(order.customer_id)}",
        f"📍 {escape(order.address)}",
        "",
        f"💳 Payment reference: {escape(order.payment_reference or 'Not provided')}",
        f"💳 Payment status: {order.payment_status.value if order.payment_status else 'Unknown'}",
    ]
    if order.needs_verification:
        lines.append("⚠️ <b>PAYMENT NEEDS VERIFICATION</b>")
    return "\n".join(lines)


class TelegramManagerNotifier(Notifier):
    """Send orders, payment screenshots and XLSX exports to the manager."""

    SERVICE = "telegram.manager"

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        export_dir: Path,
        exporter: OrderExporter = order_exporter,
    ):
        self.bot = bot
        self.chat_id = chat_id
        self.export_dir = Path(export_dir)
        self.exporter = exporter

    async def send_order_notification(self, order: CompletedOrder) -> None:
        logger.info(f"Sending order {order.order_id} to manager {self.chat_id}...")
        try:
            xlsx_path = await asyncio.to_thread(self.exporter.export, order, self.export_dir)
        except OSError as e:
            raise TransientFailure(self.SERVICE, f"XLSX export failed: {e}") from e

        try:
            await self.bot.send_message(chat_id=self.chat_id, text=format_manager_summary(order))
            await self.bot.send_document(
                chat_id=self.chat_id,
                document=FSInputFile(xlsx_path),
                caption=f"📎 Order #{order.order_id} in Excel format",
            )
        except TelegramAPIError as e:
            raise translate_telegram_error(self.SERVICE, e) from e

        logger.info(f"Order {order.order_id} successfully sent to manager {self.chat_id}")

    async def send_payment_proof(
        self,
        order_id: str,
        customer_id: str,
        amount: Decimal,
        image: Optional[bytes],
    ) -> None:
        caption = (
            f"💳 <b>Payment screenshot for order #{order_id}</b>\n"
            f"Customer: {escape(customer_id)}\n"
            f"Amount: ₹{format_amount(amount)}\n\n"
            "Please verify this payment."
        )
        try:
            if image is not None:
                await self.bot.send_photo(
                    chat_id=self.chat_id,
                    photo=BufferedInputFile(image, filename=f"payment-screenshot-{order_id}.jpg"),
                    caption=caption,
                )
            else:
                await self.bot.send_message(
                    chat_id=self.chat_id,
                    text=f"{caption}\n\n⚠️ Screenshot could not be downloaded.",
                )
        except TelegramAPIError as e:
            raise translate_telegram_error(self.SERVICE, e) from e

        logger.info(f"Payment screenshot for order {order_id} sent to manager {self.chat_id}")

    @property
    def name(self) -> str:
        return "telegram"
