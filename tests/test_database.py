import pytest
from sqlalchemy import inspect, text

from people_journal.database import DEFAULT_MEMBERS, JournalStore


@pytest.mark.asyncio
async def test_init_adds_missing_columns_to_old_database(tmp_path):
    store = JournalStore(f"sqlite+aiosqlite:///{tmp_path / 'old.db'}")
    async with store.engine.begin() as conn:
        await conn.execute(text(
            "CREATE TABLE team_members (id TEXT PRIMARY KEY, name TEXT NOT NULL, "
            "role TEXT NOT NULL, color TEXT NOT NULL)"
        ))
        await conn.execute(text(
            "INSERT INTO team_members (id, name, role, color) VALUES ('member-x', 'Old', 'Eng', '#000')"
        ))

    await store.init()

    async with store.engine.connect() as conn:
        columns = await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns("team_members")}
        )
        count = await conn.scalar(text("SELECT COUNT(*) FROM team_members"))
    await store.dispose()

    assert {"jira_account_id", "prep_notes"} <= columns
    # Existing members are kept and no defaults are seeded on top
    assert count == 1


@pytest.mark.asyncio
async def test_init_seeds_empty_database_and_is_idempotent(tmp_path):
    store = JournalStore(f"sqlite+aiosqlite:///{tmp_path / 'nested' / 'journal.db'}")

    await store.init()
    await store.init()

    async with store.engine.connect() as conn:
        count = await conn.scalar(text("SELECT COUNT(*) FROM team_members"))
        foreign_keys = await conn.scalar(text("PRAGMA foreign_keys"))
    await store.dispose()

    assert count == len(DEFAULT_MEMBERS)
    assert foreign_keys == 1
