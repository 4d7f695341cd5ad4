from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import uvicorn
import logging

from .config import Settings, get_settings
from .database import JournalStore
from .api.v1.router import api_router
from .core.exceptions import JournalError
from .services.journal_service import JournalService
from .utils.logging import setup_logging


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application around one JournalStore"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        # Startup
        setup_logging(settings.log_level)
        logger = logging.getLogger(__name__)
        logger.info(f"Starting {settings.app_name} {settings.app_version}")
        logger.info(f"AI provider: {settings.ai_provider_name or 'none'}")

        store = JournalStore(settings.database_url, echo=settings.database_echo)
        await store.init(seed_defaults=settings.seed_default_members)
        app.state.journal = JournalService(store, settings)

        yield

        # Shutdown
        logger.info(f"Shutting down {settings.app_name}")
        await store.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Engineering manager's 1:1 journal with AI extraction and prep briefings",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(JournalError)
    async def journal_error_handler(request: Request, exc: JournalError):
        if exc.status_code >= 500:
            logging.getLogger(__name__).error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    # Include API routes
    app.include_router(api_router, prefix="/api")

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "people_journal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
