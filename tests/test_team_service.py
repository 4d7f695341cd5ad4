import pytest
from sqlalchemy import func, select, text

from people_journal.core.exceptions import ConstraintViolationError, NotFoundError
from people_journal.database import DEFAULT_MEMBERS
from people_journal.models.entry import Entry
from people_journal.schemas import EntryCreate, TeamMemberCreate, TeamMemberUpdate
from people_journal.services.team_service import TeamService


@pytest.mark.asyncio
async def test_create_member_applies_defaults(journal):
    member = await journal.create_team_member(TeamMemberCreate())

    assert member.id.startswith("member-")
    assert member.name == "New Member"
    assert member.role == "Engineer"
    assert member.color == "#888888"
    assert member.jira_account_id is None
    assert member.prep_notes is None


@pytest.mark.asyncio
async def test_members_listed_in_insertion_order(journal):
    names = ["Zed", "Amy", "Moe"]
    for name in names:
        await journal.create_team_member(TeamMemberCreate(name=name))

    members = await journal.list_team_members()

    assert [m.name for m in members] == names


@pytest.mark.asyncio
async def test_generated_ids_are_unique(journal):
    first = await journal.create_team_member(TeamMemberCreate(name="A"))
    second = await journal.create_team_member(TeamMemberCreate(name="B"))

    assert first.id != second.id


@pytest.mark.asyncio
async def test_update_member_changes_only_supplied_fields(journal):
    member = await journal.create_team_member(
        TeamMemberCreate(name="Alice", role="Staff Engineer", color="#111111")
    )

    updated = await journal.update_team_member(
        member.id, TeamMemberUpdate(role="Tech Lead", jira_account_id="acc-1")
    )

    assert updated.name == "Alice"
    assert updated.role == "Tech Lead"
    assert updated.color == "#111111"
    assert updated.jira_account_id == "acc-1"


@pytest.mark.asyncio
async def test_update_unknown_member_raises_not_found(journal):
    with pytest.raises(NotFoundError):
        await journal.update_team_member("member-missing", TeamMemberUpdate(name="X"))


@pytest.mark.asyncio
async def test_delete_member_removes_their_entries(journal, store):
    keep = await journal.create_team_member(TeamMemberCreate(name="Keep"))
    gone = await journal.create_team_member(TeamMemberCreate(name="Gone"))
    await journal.create_entry(EntryCreate(member_id=keep.id, date="2025-01-01"))
    await journal.create_entry(EntryCreate(member_id=gone.id, date="2025-01-02"))
    await journal.create_entry(EntryCreate(member_id=gone.id, date="2025-01-03"))

    result = await journal.delete_team_member(gone.id)

    assert result.deleted is True
    assert [m.id for m in await journal.list_team_members()] == [keep.id]
    async with store.session() as db:
        orphaned = await db.scalar(
            select(func.count()).select_from(Entry).where(Entry.member_id == gone.id)
        )
    assert orphaned == 0
    assert len(await journal.list_entries(keep.id)) == 1


@pytest.mark.asyncio
async def test_delete_unknown_member_keeps_everything(journal):
    member = await journal.create_team_member(TeamMemberCreate(name="Stay"))
    await journal.create_entry(EntryCreate(member_id=member.id, date="2025-01-01"))

    with pytest.raises(NotFoundError):
        await journal.delete_team_member("member-missing")

    assert len(await journal.list_team_members()) == 1
    assert len(await journal.list_entries()) == 1


@pytest.mark.asyncio
async def test_prep_notes_round_trip_and_clear(journal):
    member = await journal.create_team_member(TeamMemberCreate(name="Notes"))

    result = await journal.update_prep_notes(member.id, "ask about the offsite")
    assert result.prep_notes == "ask about the offsite"
    [stored] = await journal.list_team_members()
    assert stored.prep_notes == "ask about the offsite"

    await journal.update_prep_notes(member.id, "")
    [cleared] = await journal.list_team_members()
    assert cleared.prep_notes is None


@pytest.mark.asyncio
async def test_prep_notes_for_unknown_member(journal):
    with pytest.raises(NotFoundError):
        await journal.update_prep_notes("member-missing", "hello")


@pytest.mark.asyncio
async def test_default_members_seeded_once(store):
    await store._seed_default_members()
    await store._seed_default_members()

    async with store.session() as db:
        members = await TeamService(db).list_members()

    assert [m.id for m in members] == [row[0] for row in DEFAULT_MEMBERS]


@pytest.mark.asyncio
async def test_failed_member_delete_keeps_entries(journal, store):
    member = await journal.create_team_member(TeamMemberCreate(name="Locked"))
    await journal.create_entry(EntryCreate(member_id=member.id, date="2025-01-01"))
    async with store.session() as db:
        await db.execute(text(
            "CREATE TRIGGER block_member_delete BEFORE DELETE ON team_members "
            "BEGIN SELECT RAISE(ABORT, 'member is locked'); END"
        ))
        await db.commit()

    with pytest.raises(ConstraintViolationError):
        await journal.delete_team_member(member.id)

    assert [m.id for m in await journal.list_team_members()] == [member.id]
    assert len(await journal.list_entries(member.id)) == 1
