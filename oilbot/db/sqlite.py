"""
Async database access for the sql session backend.
SQLite through aiosqlite by default, any SQLAlchemy async URL works.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from oilbot.config import settings
from oilbot.db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Engine plus session factory, created lazily on first use."""

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.db_url
        self.echo = settings.debug if echo is None else echo
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def sqlite_file(self) -> Optional[Path]:
        """Database file for file-backed SQLite URLs, None otherwise."""
        url = make_url(self.url)
        if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
            return None
        return Path(url.database)

    async def init(self) -> None:
        """Connect and create the sessions table if missing."""
        if self.sqlite_file is not None:
            self.sqlite_file.parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(self.url, echo=self.echo)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database ready: {self._engine.url.render_as_string(hide_password=True)}")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Unit of work: commit on success, roll back on error."""
        if self._sessions is None:
            await self.init()

        async with self._sessions() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise
