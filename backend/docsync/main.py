"""
Docs Sync Backend - FastAPI Application Entry Point
===================================================

Serves a documentation site's content API. Pages are synced from a GitHub
repository (or a local folder) into PostgreSQL as rendered HTML, and the
sidebar navigation is built from the stored pages and cached in Redis.

Architecture Overview:
----------------------
- FastAPI for the read API (pages, search, navigation) and admin triggers
- PostgreSQL (via asyncpg) for the synced pages
- Redis for the navigation cache and the Celery broker
- Celery workers + beat for scheduled and background syncs

Production Considerations:
--------------------------
- Put the read endpoints behind a CDN; responses only change after a sync
- Rotate ADMIN_SECRET and keep it out of logs
- Run database migrations (Alembic) instead of create_all
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from docsync.api.deps import close_cache
from docsync.api.routes import admin, docs
from docsync.config import settings
from docsync.db import close_db, init_db
from docsync.db.session import AsyncSessionLocal


# Configure logging - uses DEBUG in development for detailed traces
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager - handles startup and shutdown.

    Startup: create the documentation table if it does not exist.
    Shutdown: close the cache connection and dispose the database pool.
    """
    logger.info(f"Starting {settings.app_name}...")

    await init_db()
    logger.info("Database initialized")

    yield  # Application runs here

    logger.info("Shutting down...")
    await close_cache()
    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Documentation sync and rendering service",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,  # Set via CORS_ORIGINS env var
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# =============================================================================
# API Routes
# =============================================================================

app.include_router(
    docs.router,
    prefix=f"{settings.api_prefix}/docs",
    tags=["docs"],
)
app.include_router(
    admin.router,
    prefix=f"{settings.api_prefix}",
    tags=["admin"],
)


# =============================================================================
# Health & Status Endpoints
# =============================================================================


@app.get("/")
async def root():
    """Root endpoint - basic API information."""
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health():
    """
    Health check endpoint for load balancers and container orchestrators.

    Reports degraded instead of failing when the database is unreachable,
    so the orchestrator can tell a slow start from a dead process.
    """
    database = False
    try:
        async with AsyncSessionLocal() as db:
            database = (await db.execute(select(1))).scalar() == 1
    except Exception as e:
        logger.error(f"Database health check failed: {e}")

    return {
        "status": "healthy" if database else "degraded",
        "database": "connected" if database else "unavailable",
    }
