from fastapi import Request

from ..services.journal_service import JournalService


def get_journal(request: Request) -> JournalService:
    """The JournalService created in the app lifespan"""
    return request.app.state.journal
