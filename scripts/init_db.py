#!/usr/bin/env python3
"""
Initialize the journal database

Creates the tables, applies column upgrades to an older database and seeds
the placeholder team members into an empty one.

Usage:
    python scripts/init_db.py              # uses DATABASE_URL from .env
    python scripts/init_db.py --no-seed    # skip default team members
"""
import asyncio
import sys
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from people_journal.config import get_settings
from people_journal.database import JournalStore
from people_journal.models.base import Base


async def init_database(seed: bool = True):
    """Create all tables"""
    settings = get_settings()
    store = JournalStore(settings.database_url)

    print(f"Initializing database at {settings.database_url}...")
    print(f"Tables: {', '.join([t.name for t in Base.metadata.sorted_tables])}")
    try:
        await store.init(seed_defaults=seed)
    finally:
        await store.dispose()

    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_database(seed="--no-seed" not in sys.argv))
