#!/usr/bin/env python3
"""
Script to create the session tables for SESSION_BACKEND=sql.

Usage:
    python scripts/init_db.py
"""

import asyncio

from oilbot.config import settings
from oilbot.db.sqlite import Database


async def main() -> None:
    """Create all tables in the configured database."""
    print("Initializing database...")
    print("-" * 50)
    print(f"URL: {settings.db_url}")

    database = Database(settings.db_url)
    await database.init()
    print("✅ Session tables created")

    await database.close()


if __name__ == "__main__":
    asyncio.run(main())
