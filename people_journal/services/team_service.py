import uuid
from typing import List, Optional

from sqlalchemy import delete, literal_column, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConstraintViolationError, NotFoundError
from ..models.entry import Entry
from ..models.team_member import TeamMember
from ..schemas import TeamMemberCreate, TeamMemberUpdate
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_NAME = "New Member"
DEFAULT_ROLE = "Engineer"
DEFAULT_COLOR = "#888888"


def new_member_id() -> str:
    return f"member-{uuid.uuid4().hex[:12]}"


class TeamService:
    """Service for team member records"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_members(self) -> List[TeamMember]:
        """All team members in the order they were added"""
        stmt = select(TeamMember).order_by(literal_column("team_members.rowid"))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_member(self, member_id: str) -> Optional[TeamMember]:
        stmt = select(TeamMember).where(TeamMember.id == member_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def require_member(self, member_id: str) -> TeamMember:
        member = await self.get_member(member_id)
        if member is None:
            raise NotFoundError("member", member_id)
        return member

    async def create_member(self, data: TeamMemberCreate) -> TeamMember:
        member = TeamMember(
            id=new_member_id(),
            name=data.name or DEFAULT_NAME,
            role=data.role or DEFAULT_ROLE,
            color=data.color or DEFAULT_COLOR
        )
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)

        logger.info(f"Created team member {member.id}")
        return member

    async def update_member(self, member_id: str, data: TeamMemberUpdate) -> TeamMember:
        member = await self.require_member(member_id)

        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            if value is None and key in ("name", "role", "color"):
                continue  # NOT NULL columns
            setattr(member, key, value)

        await self.db.commit()
        await self.db.refresh(member)
        return member

    async def delete_member(self, member_id: str) -> None:
        """Delete the member and all of its entries in one transaction"""
        try:
            await self.db.execute(delete(Entry).where(Entry.member_id == member_id))
            result = await self.db.execute(delete(TeamMember).where(TeamMember.id == member_id))
            if result.rowcount == 0:
                raise NotFoundError("member", member_id)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete team member {member_id}: {e.orig}")
            raise ConstraintViolationError(
                f"failed to delete team member: {e.orig}"
            ) from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Deleted team member {member_id} and their entries")

    async def update_prep_notes(self, member_id: str, prep_notes: str) -> None:
        """Store manual prep notes; an empty string clears them"""
        result = await self.db.execute(
            update(TeamMember)
            .where(TeamMember.id == member_id)
            .values(prep_notes=prep_notes or None)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError("member", member_id)
        await self.db.commit()

    async def set_jira_account_id(self, member_id: str, account_id: str) -> None:
        await self.db.execute(
            update(TeamMember)
            .where(TeamMember.id == member_id)
            .values(jira_account_id=account_id)
        )
        await self.db.commit()
