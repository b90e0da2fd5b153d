"""Tests for session stores (memory and SQLite) and per-customer locking."""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from oilbot.core.catalog import Catalog
from oilbot.core.orders import ConversationState, OrderLineItem, PaymentStatus, Session
from oilbot.db.sessions import KeyedLock, MemorySessionStore, SqlSessionStore
from oilbot.db.sqlite import Database


@pytest.fixture(params=["memory", "sql"])
def make_store(request, temp_dir):
    """Factory creating the store inside the running event loop."""

    async def _make():
        if request.param == "memory":
            return MemorySessionStore()
        database = Database(f"sqlite+aiosqlite:///{temp_dir / 'sessions.db'}", echo=False)
        await database.init()
        return SqlSessionStore(database)

    return _make


def sample_session(customer_id="42", updated_at=None):
    sunflower = Catalog.default().find_by_id(1)
    return Session(
        customer_id=customer_id,
        state=ConversationState.AWAITING_PAYMENT,
        selected_items=[OrderLineItem(sunflower, Decimal("2.5")), OrderLineItem(sunflower)],
        current_item_cursor=1,
        order_id="OIL-000042",
        total=Decimal("300.0"),
        payment_order_id="order_xyz",
        payment_request_sent=True,
        payment_status=PaymentStatus.PENDING_VERIFICATION,
        updated_at=updated_at or datetime.now(),
    )


class TestSessionStore:
    def test_get_missing(self, make_store):
        async def _run():
            store = await make_store()
            try:
                return await store.get("nobody")
            finally:
                await store.close()

        assert asyncio.run(_run()) is None

    def test_save_and_get(self, make_store):
        original = sample_session()

        async def _run():
            store = await make_store()
            try:
                await store.save(original)
                return await store.get("42")
            finally:
                await store.close()

        loaded = asyncio.run(_run())
        assert loaded == original
        assert loaded is not original

    def test_save_overwrites(self, make_store):
        async def _run():
            store = await make_store()
            try:
                session = sample_session()
                await store.save(session)
                session.state = ConversationState.AWAITING_ADDRESS
                session.delivery_address = "Pune"
                await store.save(session)
                return await store.get("42")
            finally:
                await store.close()

        loaded = asyncio.run(_run())
        assert loaded.state == ConversationState.AWAITING_ADDRESS
        assert loaded.delivery_address == "Pune"

    def test_get_or_create(self, make_store):
        async def _run():
            store = await make_store()
            try:
                created = await store.get_or_create("7")
                again = await store.get_or_create("7")
                return created, again
            finally:
                await store.close()

        created, again = asyncio.run(_run())
        assert created.state == ConversationState.SELECTING_ITEMS
        assert again.customer_id == "7"
        assert again.created_at == created.created_at

    def test_delete(self, make_store):
        async def _run():
            store = await make_store()
            try:
                await store.save(sample_session())
                await store.delete("42")
                await store.delete("42")
                return await store.get("42")
            finally:
                await store.close()

        assert asyncio.run(_run()) is None

    def test_find_by_payment_order(self, make_store):
        async def _run():
            store = await make_store()
            try:
                await store.save(sample_session())
                return (
                    await store.find_by_payment_order("order_xyz"),
                    await store.find_by_payment_order("order_none"),
                )
            finally:
                await store.close()

        found, missing = asyncio.run(_run())
        assert found.customer_id == "42"
        assert missing is None

    def test_purge_idle(self, make_store):
        now = datetime(2024, 5, 1, 12, 0)

        async def _run():
            store = await make_store()
            try:
                await store.save(sample_session("old", updated_at=now - timedelta(hours=2)))
                await store.save(sample_session("fresh", updated_at=now - timedelta(minutes=5)))
                purged = await store.purge_idle(timedelta(hours=1), now=now)
                return purged, await store.get("old"), await store.get("fresh")
            finally:
                await store.close()

        purged, old, fresh = asyncio.run(_run())
        assert purged == 1
        assert old is None
        assert fresh is not None


class TestKeyedLock:
    def test_serializes_same_key(self):
        locks = KeyedLock()
        trace = []

        async def worker(name):
            async with locks("a"):
                trace.append(f"{name}-in")
                await asyncio.sleep(0.01)
                trace.append(f"{name}-out")

        async def _run():
            await asyncio.gather(worker("x"), worker("y"))

        asyncio.run(_run())
        assert trace == ["x-in", "x-out", "y-in", "y-out"]

    def test_different_keys_run_concurrently(self):
        locks = KeyedLock()
        trace = []

        async def worker(key):
            async with locks(key):
                trace.append(f"{key}-in")
                await asyncio.sleep(0.01)
                trace.append(f"{key}-out")

        async def _run():
            await asyncio.gather(worker("a"), worker("b"))

        asyncio.run(_run())
        assert trace[:2] == ["a-in", "b-in"]

    def test_locks_released(self):
        locks = KeyedLock()

        async def _run():
            async with locks("a"):
                assert len(locks) == 1
            return len(locks)

        assert asyncio.run(_run()) == 0


class TestMemoryStoreIsolation:
    def test_stored_copy_not_shared(self):
        store = MemorySessionStore()
        session = sample_session()

        async def _run():
            await store.save(session)
            session.state = ConversationState.AWAITING_ADDRESS
            return await store.get("42")

        assert asyncio.run(_run()).state == ConversationState.AWAITING_PAYMENT
        assert len(store) == 1
