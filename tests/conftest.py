"""Pytest fixtures for oilbot tests."""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from oilbot.core.catalog import Catalog
from oilbot.core.dispatcher import OrderDispatcher
from oilbot.core.orders import ConversationEngine, OrderArchive
from oilbot.db.sessions import MemorySessionStore
from oilbot.errors import TransientFailure
from oilbot.integrations.base import MediaFetcher, MessagingGateway
from oilbot.integrations.notify.base import Notifier
from oilbot.integrations.payments.base import PaymentGateway

BASE_URL = "https://shop.example"
ORDER_ID = "OIL-123456"


class FakeMessenger(MessagingGateway):
    """Records sent messages; raises the queued errors first."""

    def __init__(self):
        self.sent = []
        self.errors = []

    async def send(self, customer_id, text, buttons=()):
        if self.errors:
            raise self.errors.pop(0)
        self.sent.append((customer_id, text, tuple(buttons)))

    def texts(self, customer_id=None):
        return [text for cid, text, _ in self.sent if customer_id is None or cid == customer_id]


class FakePayments(PaymentGateway):
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def create_order(self, amount, currency, receipt_id, notes=None):
        self.calls.append((amount, currency, receipt_id, notes))
        if self.error is not None:
            raise self.error
        return f"order_{receipt_id}"

    async def render_pay_page(self, session):
        return f"<html>pay {session.order_id} {session.total}</html>"

    @property
    def name(self):
        return "fake"


class FakeMedia(MediaFetcher):
    def __init__(self, content=b"\xff\xd8jpeg", error=None):
        self.content = content
        self.error = error
        self.fetched = []

    async def fetch(self, media_reference):
        self.fetched.append(media_reference)
        if self.error is not None:
            raise self.error
        return self.content


class FakeNotifier(Notifier):
    def __init__(self, fail=False):
        self.fail = fail
        self.orders = []
        self.proofs = []

    async def send_order_notification(self, order):
        if self.fail:
            raise TransientFailure("fake.notify", "down")
        self.orders.append(order)

    async def send_payment_proof(self, order_id, customer_id, amount, image):
        if self.fail:
            raise TransientFailure("fake.notify", "down")
        self.proofs.append((order_id, customer_id, amount, image))

    @property
    def name(self):
        return "fake"


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def catalog():
    return Catalog.default()


@pytest.fixture
def engine(catalog):
    return ConversationEngine(catalog, base_url=BASE_URL, order_id_factory=lambda now: ORDER_ID)


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def payments():
    return FakePayments()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def dispatcher(engine, store, messenger, payments, media, notifier, temp_dir):
    return OrderDispatcher(
        engine=engine,
        store=store,
        messenger=messenger,
        payments=payments,
        media=media,
        notifiers=[notifier],
        archive=OrderArchive(temp_dir / "orders"),
    )


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 1, 12, 30)
