"""
GigIt - Main Application

FastAPI backend for a two-sided labor marketplace:
- SQLAlchemy over PostgreSQL (SQLite for local runs and tests)
- JWT authentication for workers and businesses
- Presigned uploads to an S3-compatible bucket
- Transactional email over SMTP

Run: uvicorn gigit.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from gigit import __version__
from gigit.api import api_router
from gigit.core.config import get_settings
from gigit.core.exceptions import GigItError, InvalidStatusTransition, StorageNotConfigured
from gigit.core.logging_config import setup_logging
from gigit.db.database import init_db, ping_database
from gigit.db.seed import seed_skills
from gigit.schemas.schemas import ErrorResponse

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed the skill catalog on startup."""
    setup_logging()
    logger.info("GigIt API starting up")
    init_db()
    if settings.seed_skills_on_startup:
        seed_skills()

    yield

    logger.info("GigIt API shutting down")


# Create FastAPI app
app = FastAPI(
    title="GigIt",
    description="""
    A marketplace connecting skilled workers with businesses.

    ## Features
    - **Authentication**: JWT-based auth for workers and businesses, password reset by email
    - **Workers**: Onboarding, profile, portfolio, applications, contracts, saved jobs
    - **Businesses**: Job posting, applicant review, hiring, contracts, dashboard
    - **Jobs**: Search, filter, sort and apply
    - **Messaging**: One-to-one conversations with unread tracking
    - **Notifications**: In-app notifications for hiring events and messages
    - **Uploads**: Presigned URLs for resumes, images and licenses
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# Exception handlers
@app.exception_handler(InvalidStatusTransition)
async def invalid_transition_handler(request: Request, exc: InvalidStatusTransition):
    logger.info("Rejected status change: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=exc.code, detail=str(exc)).model_dump(),
    )


@app.exception_handler(StorageNotConfigured)
async def storage_not_configured_handler(request: Request, exc: StorageNotConfigured):
    logger.error("Upload requested but storage is not configured")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse(error=exc.code, detail="File storage is not available").model_dump(),
    )


@app.exception_handler(GigItError)
async def gigit_error_handler(request: Request, exc: GigItError):
    logger.error("Unhandled domain error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=exc.code, detail=str(exc)).model_dump(),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Unique constraint races (double apply, double accept) end up here."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=ErrorResponse(error="conflict", detail="The request conflicts with existing data").model_dump(),
    )


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "GigIt", "version": __version__, "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    db_ok = ping_database()
    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected"
    }
