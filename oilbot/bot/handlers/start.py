"""
Diagnostic commands.
"""

import logging

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from oilbot.core.dispatcher import OrderDispatcher

logger = logging.getLogger(__name__)

router = Router(name="start")


@router.message(Command("ping"))
async def cmd_ping(message: Message, order_dispatcher: OrderDispatcher) -> None:
    """Send a test message through the messaging gateway."""
    customer_id = str(message.chat.id)
    delivered = await order_dispatcher.send_test(customer_id)
    logger.info(f"Test message to {customer_id}: {'delivered' if delivered else 'failed'}")
