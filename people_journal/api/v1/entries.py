"""
Entry API Endpoints

Provides endpoints for recording and editing 1:1 meeting entries
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_journal
from ...schemas import DeleteResult, EntryCreate, EntryRead, EntryUpdate
from ...services.journal_service import JournalService

router = APIRouter()


@router.get("", response_model=List[EntryRead])
async def list_entries(
    member_id: Optional[str] = Query(None, description="Only entries for this team member"),
    journal: JournalService = Depends(get_journal)
):
    """List entries, newest meeting date first"""
    return await journal.list_entries(member_id)


@router.get("/{entry_id}", response_model=EntryRead)
async def get_entry(entry_id: str, journal: JournalService = Depends(get_journal)):
    return await journal.get_entry(entry_id)


@router.post("", response_model=EntryRead, status_code=201)
async def create_entry(request: EntryCreate, journal: JournalService = Depends(get_journal)):
    """
    Record a 1:1 entry

    Creating an entry clears the member's manual prep notes, since they were
    written for the meeting that has now happened.
    """
    return await journal.create_entry(request)


@router.put("/{entry_id}", response_model=EntryRead)
async def update_entry(
    entry_id: str,
    request: EntryUpdate,
    journal: JournalService = Depends(get_journal)
):
    """Update only the fields present in the request body"""
    return await journal.update_entry(entry_id, request)


@router.delete("/{entry_id}", response_model=DeleteResult)
async def delete_entry(entry_id: str, journal: JournalService = Depends(get_journal)):
    return await journal.delete_entry(entry_id)
