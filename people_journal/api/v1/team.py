"""
Team API Endpoints

CRUD for the manager's direct reports plus their manual prep notes
"""
from typing import List

from fastapi import APIRouter, Depends

from ..deps import get_journal
from ...schemas import (
    DeleteResult, PrepNotesResult, PrepNotesUpdate,
    TeamMemberCreate, TeamMemberRead, TeamMemberUpdate,
)
from ...services.journal_service import JournalService

router = APIRouter()


@router.get("", response_model=List[TeamMemberRead])
async def list_team_members(journal: JournalService = Depends(get_journal)):
    """List team members in the order they were added"""
    return await journal.list_team_members()


@router.post("", response_model=TeamMemberRead, status_code=201)
async def create_team_member(
    request: TeamMemberCreate,
    journal: JournalService = Depends(get_journal)
):
    """Create a team member; empty fields get defaults"""
    return await journal.create_team_member(request)


@router.put("/{member_id}", response_model=TeamMemberRead)
async def update_team_member(
    member_id: str,
    request: TeamMemberUpdate,
    journal: JournalService = Depends(get_journal)
):
    return await journal.update_team_member(member_id, request)


@router.delete("/{member_id}", response_model=DeleteResult)
async def delete_team_member(member_id: str, journal: JournalService = Depends(get_journal)):
    """Delete a team member together with all of their entries"""
    return await journal.delete_team_member(member_id)


@router.put("/{member_id}/prep-notes", response_model=PrepNotesResult)
async def update_prep_notes(
    member_id: str,
    request: PrepNotesUpdate,
    journal: JournalService = Depends(get_journal)
):
    return await journal.update_prep_notes(member_id, request.prep_notes)
