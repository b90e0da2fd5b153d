"""
Order flow handlers.

Every customer message is normalized into an InboundEvent and handed to the
OrderDispatcher; all decisions are made by the conversation engine.
"""

import logging
from typing import Optional

from aiogram import F, Router
from aiogram.types import Message

from oilbot.core.dispatcher import OrderDispatcher
from oilbot.core.orders.models import InboundEvent

logger = logging.getLogger(__name__)

router = Router(name="orders")


def is_image_document(message: Message) -> bool:
    document = message.document
    return bool(document and document.mime_type and document.mime_type.startswith("image/"))


def event_from_message(message: Message) -> Optional[InboundEvent]:
    """
    Normalize a Telegram message.

    Returns:
        InboundEvent, or None for messages the order flow does not handle
        (stickers, voice, non-image documents...)
    """
    customer_id = str(message.chat.id)

    if message.photo:
        # Largest size comes last
        return InboundEvent.image(customer_id, message.photo[-1].file_id)

    if is_image_document(message):
        return InboundEvent.image(customer_id, message.document.file_id)

    if message.text is not None:
        return InboundEvent.text(customer_id, message.text)

    return None


@router.message(F.photo)
@router.message(F.document.mime_type.startswith("image/"))
@router.message(F.text)
async def handle_message(message: Message, order_dispatcher: OrderDispatcher) -> None:
    event = event_from_message(message)
    if event is None:
        logger.debug(f"Ignoring unsupported message from {message.chat.id}")
        return
    await order_dispatcher.handle(event)
