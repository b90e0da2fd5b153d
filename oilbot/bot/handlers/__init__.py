"""
Bot handlers registration.
"""

from aiogram import Dispatcher

from oilbot.bot.handlers.order import router as order_router
from oilbot.bot.handlers.start import router as start_router


def register_handlers(dp: Dispatcher) -> None:
    """Register all handlers to dispatcher."""
    # Diagnostic commands first, everything else goes to the order flow
    dp.include_router(start_router)
    dp.include_router(order_router)
