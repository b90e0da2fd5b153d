"""
Reply keyboards for order flow.
"""

from typing import Sequence

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove
from aiogram.utils.keyboard import ReplyKeyboardBuilder


def get_choice_keyboard(options: Sequence[str]) -> ReplyKeyboardMarkup:
    """One row of reply buttons; tapping a button sends its text."""
    builder = ReplyKeyboardBuilder()
    builder.row(*(KeyboardButton(text=option) for option in options))
    return builder.as_markup(resize_keyboard=True, one_time_keyboard=True)


def get_reply_markup(options: Sequence[str]) -> ReplyKeyboardMarkup | ReplyKeyboardRemove:
    """Keyboard for the given options, or removal of a previous one."""
    if options:
        return get_choice_keyboard(options)
    return ReplyKeyboardRemove()
