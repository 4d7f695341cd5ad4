from fastapi import APIRouter, Depends

from ..deps import get_journal
from ...schemas import AppConfig
from ...services.journal_service import JournalService

router = APIRouter()


@router.get("/config", response_model=AppConfig, response_model_exclude_none=True)
async def get_config(journal: JournalService = Depends(get_journal)):
    """Which optional capabilities (AI provider, JIRA) are configured"""
    return journal.get_config()
