import uuid
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConstraintViolationError, NotFoundError
from ..models.base import utc_now_iso
from ..models.entry import Entry, LIST_FIELDS, UPDATABLE_FIELDS
from ..models.team_member import TeamMember
from ..schemas import EntryCreate, EntryUpdate
from ..utils.logging import get_logger

logger = get_logger(__name__)


def new_entry_id() -> str:
    return f"entry-{uuid.uuid4().hex[:12]}"


class EntryService:
    """Service for 1:1 entries"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_entries(
        self,
        member_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Entry]:
        """Entries newest date first, optionally for one member"""
        stmt = select(Entry)
        if member_id:
            stmt = stmt.where(Entry.member_id == member_id)
        stmt = stmt.order_by(Entry.date.desc(), Entry.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_entry(self, entry_id: str) -> Optional[Entry]:
        stmt = select(Entry).where(Entry.id == entry_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def require_entry(self, entry_id: str) -> Entry:
        entry = await self.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("entry", entry_id)
        return entry

    async def create_entry(self, data: EntryCreate) -> Entry:
        """Insert an entry and clear the member's stale prep notes"""
        now = utc_now_iso()
        entry = Entry(
            id=data.id or new_entry_id(),
            member_id=data.member_id,
            date=data.date or now,
            created_at=now,
            updated_at=now,
            **data.model_dump(include=set(UPDATABLE_FIELDS))
        )

        try:
            self.db.add(entry)
            await self.db.flush()
            await self.db.execute(
                update(TeamMember)
                .where(TeamMember.id == data.member_id)
                .values(prep_notes=None)
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Failed to create entry for member {data.member_id}: {e.orig}")
            raise ConstraintViolationError(
                f"failed to create entry: {e.orig}"
            ) from e

        await self.db.refresh(entry)
        logger.info(f"Created entry {entry.id} for member {entry.member_id}")
        return entry

    async def update_entry(self, entry_id: str, data: EntryUpdate) -> Entry:
        """Apply only the fields present in ``data``"""
        entry = await self.require_entry(entry_id)

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return entry

        for field, value in changes.items():
            if field in LIST_FIELDS and value is None:
                value = []
            setattr(entry, field, value)
        entry.updated_at = utc_now_iso()

        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def delete_entry(self, entry_id: str) -> None:
        result = await self.db.execute(delete(Entry).where(Entry.id == entry_id))
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError("entry", entry_id)
        await self.db.commit()
        logger.info(f"Deleted entry {entry_id}")
