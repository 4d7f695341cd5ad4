"""
AI API Endpoints

Transcript extraction and pre-1:1 prep briefings
"""
from fastapi import APIRouter, Depends

from ..deps import get_journal
from ...schemas import ExtractRequest, ExtractionResult, PrepRequest, PrepResponse
from ...services.journal_service import JournalService

router = APIRouter()


@router.post("/extract", response_model=ExtractionResult)
async def extract_transcript(request: ExtractRequest, journal: JournalService = Depends(get_journal)):
    """
    Extract structured insight from a 1:1 transcript

    Results are cached by member name and transcript text, so re-submitting
    the same transcript does not call the LLM again.
    """
    return await journal.extract_transcript(request.transcript, request.member_name)


@router.post("/prep", response_model=PrepResponse, response_model_exclude_none=True)
async def fetch_prep(request: PrepRequest, journal: JournalService = Depends(get_journal)):
    """
    Generate the briefing for the next 1:1

    Set ``force`` to skip the cached briefing and regenerate it.
    """
    return await journal.fetch_prep(request.member_id, force=request.force)
