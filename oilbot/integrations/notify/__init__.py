"""
Fulfillment notifier factory.
"""

import logging

from aiogram import Bot

from oilbot.config import Settings, settings
from oilbot.integrations.notify.base import Notifier
from oilbot.integrations.notify.email import EmailNotifier
from oilbot.integrations.notify.telegram import TelegramManagerNotifier

logger = logging.getLogger(__name__)


def get_notifiers(bot: Bot | None, config: Settings = settings) -> list[Notifier]:
    """Every notifier that has its settings filled in."""
    notifiers: list[Notifier] = []

    if bot is not None and config.manager_chat_id is not None:
        notifiers.append(TelegramManagerNotifier(bot, config.manager_chat_id, config.orders_path))

    if config.email_configured:
        notifiers.append(EmailNotifier(
            host=config.smtp_host,
            port=config.smtp_port,
            user=config.email_user,
            password=config.email_app_password,
            recipient=config.supplier_email,
        ))

    if not notifiers:
        logger.warning("No fulfillment notifier configured; completed orders are only archived")

    return notifiers


__all__ = [
    "EmailNotifier",
    "Notifier",
    "TelegramManagerNotifier",
    "get_notifiers",
]
