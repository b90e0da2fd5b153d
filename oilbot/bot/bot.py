"""
Telegram bot initialization and configuration.
"""

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from oilbot.config import settings


def create_bot(token: str | None = None) -> Bot:
    """Create configured Telegram bot instance."""
    return Bot(
        token=token or settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def create_dispatcher() -> Dispatcher:
    """Create dispatcher. Conversation state lives in the session store, not in FSM storage."""
    return Dispatcher(storage=MemoryStorage())
