"""Tests for Telegram message normalization and handlers."""

import asyncio
from types import SimpleNamespace

from oilbot.bot.handlers.order import event_from_message, handle_message
from oilbot.bot.keyboards.order import get_reply_markup
from oilbot.core.orders import EventKind


def make_message(text=None, photo=None, document=None, chat_id=555):
    return SimpleNamespace(
        chat=SimpleNamespace(id=chat_id),
        text=text,
        photo=photo,
        document=document,
    )


class RecordingDispatcher:
    def __init__(self):
        self.events = []

    async def handle(self, event):
        self.events.append(event)


class TestEventFromMessage:
    def test_text(self):
        event = event_from_message(make_message(text="1,3"))
        assert event.kind == EventKind.TEXT
        assert event.customer_id == "555"
        assert event.payload == "1,3"

    def test_photo_uses_largest_size(self):
        photo = [SimpleNamespace(file_id="small"), SimpleNamespace(file_id="large")]
        event = event_from_message(make_message(photo=photo))
        assert event.kind == EventKind.IMAGE
        assert event.payload == "large"

    def test_image_document(self):
        document = SimpleNamespace(file_id="doc-1", mime_type="image/png")
        event = event_from_message(make_message(document=document))
        assert event.kind == EventKind.IMAGE
        assert event.payload == "doc-1"

    def test_other_document_ignored(self):
        document = SimpleNamespace(file_id="doc-2", mime_type="application/pdf")
        assert event_from_message(make_message(document=document)) is None

    def test_sticker_ignored(self):
        assert event_from_message(make_message()) is None


class TestHandleMessage:
    def test_forwards_to_dispatcher(self):
        dispatcher = RecordingDispatcher()
        asyncio.run(handle_message(make_message(text="menu"), order_dispatcher=dispatcher))
        [event] = dispatcher.events
        assert event.payload == "menu"

    def test_unsupported_not_forwarded(self):
        dispatcher = RecordingDispatcher()
        asyncio.run(handle_message(make_message(), order_dispatcher=dispatcher))
        assert dispatcher.events == []


class TestReplyMarkup:
    def test_buttons(self):
        markup = get_reply_markup(("confirm", "cancel"))
        assert [button.text for button in markup.keyboard[0]] == ["confirm", "cancel"]
        assert markup.one_time_keyboard

    def test_no_buttons_removes_keyboard(self):
        assert get_reply_markup(()).remove_keyboard
