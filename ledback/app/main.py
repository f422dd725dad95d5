"""
FastAPI Application Entry Point.

This is the main application file for the Ledback bookkeeping backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from ledback.app.core.config import settings
from ledback.app.api.v1.router import router as api_v1_router
from ledback.app.db.session import engine, Base, AsyncSessionLocal
from ledback.app.core.observability import ObservabilityMiddleware, configure_logging
from ledback.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    integrity_exception_handler,
    generic_exception_handler
)
from ledback.app.domain.sync.merge import get_merge_strategy
from ledback.app.services.ledger_seed import ensure_default_ledgers

# Import models to ensure they are registered with Base
from ledback.app.models.ledger import Ledger
from ledback.app.models.entry import Entry, EntryLine
from ledback.app.models.audit_log import AuditLog

logger = logging.getLogger("ledback.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.
    
    1. Configures logging and checks the sync merge strategy name.
    2. Creates database tables.
    3. Seeds the global default ledgers (if enabled).
    """
    configure_logging()
    get_merge_strategy(settings.sync_merge_strategy)
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    if settings.seed_default_ledgers:
        async with AsyncSessionLocal() as db:
            await ensure_default_ledgers(db)
    
    logger.info("%s started (merge strategy: %s)", settings.app_name, settings.sync_merge_strategy)
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Double-entry bookkeeping backend with offline-first sync",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    
    Returns:
        dict: Status and application information
    """
    return {
        "ok": True,
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API router
app.include_router(api_v1_router, prefix=settings.api_prefix)
