"""
Telegram implementations of the messaging channel.
"""

import logging
from typing import Sequence

from aiogram import Bot
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramNotFound,
    TelegramUnauthorizedError,
)

from oilbot.bot.keyboards.order import get_reply_markup
from oilbot.errors import AuthExpired, CollaboratorError, NotFound, TransientFailure
from oilbot.integrations.base import MediaFetcher, MessagingGateway

logger = logging.getLogger(__name__)


def translate_telegram_error(service: str, error: TelegramAPIError) -> CollaboratorError:
    """Map aiogram exceptions onto collaborator errors."""
    if isinstance(error, TelegramUnauthorizedError):
        return AuthExpired(service, "Telegram bot token was rejected. Update TELEGRAM_BOT_TOKEN in .env file.")
    if isinstance(error, (TelegramNotFound, TelegramBadRequest)):
        return NotFound(service, error.message)
    return TransientFailure(service, str(error))


class TelegramGateway(MessagingGateway):
    """Send customer messages through the bot."""

    SERVICE = "telegram.send"

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(self, customer_id: str, text: str, buttons: Sequence[str] = ()) -> None:
        logger.info(f"Sending to {customer_id}: {text[:80]!r}")
        try:
            await self.bot.send_message(
                chat_id=customer_id,
                text=text,
                reply_markup=get_reply_markup(buttons),
            )
        except TelegramAPIError as e:
            raise translate_telegram_error(self.SERVICE, e) from e


class TelegramMediaFetcher(MediaFetcher):
    """Download photos by Telegram file_id."""

    SERVICE = "telegram.download"

    def __init__(self, bot: Bot):
        self.bot = bot

    async def fetch(self, media_reference: str) -> bytes:
        try:
            buffer = await self.bot.download(media_reference)
        except TelegramAPIError as e:
            raise translate_telegram_error(self.SERVICE, e) from e

        if buffer is None:
            raise NotFound(self.SERVICE, f"no content for {media_reference}")
        return buffer.read()
