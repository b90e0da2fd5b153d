"""
Session stores.

Exactly one Session per customer. The store also owns per-customer locking:
every read-modify-write of a Session happens inside ``store.lock(customer_id)``
so events from the same customer are applied one at a time, while different
customers never wait for each other.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Optional

from sqlalchemy import delete, select

from oilbot.core.orders.models import Session
from oilbot.db.models import SessionRecord
from oilbot.db.sqlite import Database

logger = logging.getLogger(__name__)


class KeyedLock:
    """asyncio locks created on demand per key and dropped when unused."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def __call__(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class SessionStore(ABC):
    """Abstract session store."""

    def __init__(self):
        self._locks = KeyedLock()

    def lock(self, customer_id: str):
        """Async context manager serializing work on one customer."""
        return self._locks(customer_id)

    @abstractmethod
    async def get(self, customer_id: str) -> Optional[Session]:
        """Session of the customer, None when no order is in progress."""
        pass

    @abstractmethod
    async def save(self, session: Session) -> None:
        pass

    @abstractmethod
    async def delete(self, customer_id: str) -> None:
        """Remove the customer's session. No-op when there is none."""
        pass

    @abstractmethod
    async def find_by_payment_order(self, payment_order_id: str) -> Optional[Session]:
        pass

    @abstractmethod
    async def _idle_customers(self, cutoff: datetime) -> list[str]:
        """Customers whose session was last updated before cutoff."""
        pass

    async def get_or_create(self, customer_id: str) -> Session:
        session = await self.get(customer_id)
        if session is None:
            session = Session(customer_id=customer_id)
            await self.save(session)
        return session

    async def purge_idle(self, max_idle: timedelta, now: Optional[datetime] = None) -> int:
        """Delete sessions idle for longer than max_idle. Returns how many."""
        cutoff = (now or datetime.now()) - max_idle
        purged = 0
        for customer_id in await self._idle_customers(cutoff):
            async with self.lock(customer_id):
                # Re-check: the customer may have written while we waited
                session = await self.get(customer_id)
                if session is not None and session.updated_at < cutoff:
                    await self.delete(customer_id)
                    purged += 1
        if purged:
            logger.info(f"Purged {purged} idle sessions")
        return purged

    async def close(self) -> None:
        pass


class MemorySessionStore(SessionStore):
    """Process-local store. Sessions live until deleted or the process exits."""

    def __init__(self):
        super().__init__()
        self._sessions: dict[str, dict] = {}

    async def get(self, customer_id: str) -> Optional[Session]:
        data = self._sessions.get(customer_id)
        return Session.from_dict(data) if data is not None else None

    async def save(self, session: Session) -> None:
        # Stored as a snapshot so callers never share mutable state with the store
        self._sessions[session.customer_id] = session.to_dict()

    async def delete(self, customer_id: str) -> None:
        self._sessions.pop(customer_id, None)

    async def find_by_payment_order(self, payment_order_id: str) -> Optional[Session]:
        for data in self._sessions.values():
            if data.get("payment_order_id") == payment_order_id:
                return Session.from_dict(data)
        return None

    async def _idle_customers(self, cutoff: datetime) -> list[str]:
        return [
            customer_id
            for customer_id, data in self._sessions.items()
            if datetime.fromisoformat(data["updated_at"]) < cutoff
        ]

    def __len__(self) -> int:
        return len(self._sessions)


class SqlSessionStore(SessionStore):
    """Durable store on top of async SQLAlchemy."""

    def __init__(self, database: Database):
        super().__init__()
        self.database = database

    async def get(self, customer_id: str) -> Optional[Session]:
        async with self.database.session() as db:
            record = await db.get(SessionRecord, customer_id)
            return Session.from_dict(record.data) if record is not None else None

    async def save(self, session: Session) -> None:
        async with self.database.session() as db:
            await db.merge(SessionRecord(
                customer_id=session.customer_id,
                state=session.state.value,
                payment_order_id=session.payment_order_id,
                data=session.to_dict(),
                created_at=session.created_at,
                updated_at=session.updated_at,
            ))

    async def delete(self, customer_id: str) -> None:
        async with self.database.session() as db:
            await db.execute(delete(SessionRecord).where(SessionRecord.customer_id == customer_id))

    async def find_by_payment_order(self, payment_order_id: str) -> Optional[Session]:
        async with self.database.session() as db:
            result = await db.execute(
                select(SessionRecord).where(SessionRecord.payment_order_id == payment_order_id)
            )
            record = result.scalars().first()
            return Session.from_dict(record.data) if record is not None else None

    async def _idle_customers(self, cutoff: datetime) -> list[str]:
        async with self.database.session() as db:
            result = await db.execute(
                select(SessionRecord.customer_id).where(SessionRecord.updated_at < cutoff)
            )
            return list(result.scalars().all())

    async def close(self) -> None:
        await self.database.close()
