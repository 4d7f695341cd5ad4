from fastapi import APIRouter
from .team import router as team_router
from .entries import router as entries_router
from .ai import router as ai_router
from .config import router as config_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(team_router, prefix="/team", tags=["team"])
api_router.include_router(entries_router, prefix="/entries", tags=["entries"])
api_router.include_router(ai_router, tags=["ai"])
api_router.include_router(config_router, tags=["config"])
