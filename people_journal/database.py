import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event, func, inspect, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from .models.base import Base
from .models.team_member import TeamMember
from .models.entry import Entry  # noqa: F401  (registers the table)
from .models.cache import CacheRecord  # noqa: F401

logger = logging.getLogger(__name__)

# Columns added after the first schema version: (table, column, type)
ADDITIVE_COLUMNS = (
    ("team_members", "jira_account_id", "TEXT"),
    ("team_members", "prep_notes", "TEXT"),
)

DEFAULT_MEMBERS = (
    ("member-1", "Engineer 1", "Engineer", "#E07A5F"),
    ("member-2", "Engineer 2", "Engineer", "#3D405B"),
    ("member-3", "Engineer 3", "Engineer", "#81B29A"),
    ("member-4", "Engineer 4", "Engineer", "#F2CC8F"),
)


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _apply_additive_columns(sync_conn) -> None:
    inspector = inspect(sync_conn)
    for table, column, ddl_type in ADDITIVE_COLUMNS:
        existing = {col["name"] for col in inspector.get_columns(table)}
        if column in existing:
            continue
        sync_conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
        logger.info(f"Added column {table}.{column}")


def _ensure_parent_dir(database_url: str) -> None:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return
    if not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class JournalStore:
    """The single shared database handle.

    All access goes through :meth:`session`, which holds one lock for the
    lifetime of the session, so commands never interleave their queries.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        _ensure_parent_dir(database_url)

        # Create async engine
        self.engine = create_async_engine(
            database_url,
            echo=echo,
            future=True
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _set_sqlite_pragmas)

        # Create session factory
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._lock:
            async with self._session_factory() as session:
                try:
                    yield session
                finally:
                    await session.close()

    async def init(self, seed_defaults: bool = True) -> None:
        """Create tables, apply additive upgrades and seed placeholder members."""
        logger.info(f"Database: {self.database_url}")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.run_sync(_apply_additive_columns)

        if seed_defaults:
            await self._seed_default_members()

    async def _seed_default_members(self) -> None:
        async with self.session() as session:
            count = await session.scalar(select(func.count()).select_from(TeamMember))
            if count:
                return
            for member_id, name, role, color in DEFAULT_MEMBERS:
                session.add(TeamMember(id=member_id, name=name, role=role, color=color))
            await session.commit()
            logger.info(f"Seeded {len(DEFAULT_MEMBERS)} default team members")

    async def dispose(self) -> None:
        await self.engine.dispose()

