"""
EduMate Study Groups API

Main entry point for the study group membership and scheduling service.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from common.database import MongoDB
from common.utils import success_response
from studygroups.config import settings
from studygroups.dependencies import init_auth_provider, init_study_group_services
from studygroups.router import router as study_groups_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Database Instance
# =============================================================================
main_db = MongoDB()


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections
    and service initialization.
    """
    logger.info("Starting EduMate Study Groups API...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        max_pool_size=settings.MONGODB_MAX_POOL_SIZE,
        server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    )

    gateway = init_study_group_services(db=main_db.db, settings=settings)
    await gateway.ensure_indexes()
    init_auth_provider(settings)
    logger.info("EduMate Study Groups API started successfully")

    yield

    logger.info("Shutting down EduMate Study Groups API...")
    await main_db.disconnect()


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="EduMate Study Groups API",
    description="Study group membership and session scheduling",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"

app.include_router(study_groups_router, prefix=API_PREFIX, tags=["Study Groups"])


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get("/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and database connection.
    """
    return success_response({
        "status": "ok",
        "version": "1.0.0",
        "database": await main_db.ping(),
    })


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
