"""
Autocrypt Peer Service - Main Application Entry Point

Tracks Autocrypt trust state for correspondents from incoming mail and
recommends whether outgoing mail should be encrypted.

Security Notes:
- Binds to 127.0.0.1 only (no external access)
- All peer endpoints require bearer token authentication
- Key data is stored opaque and never logged
"""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from api import auth, peers
from config import settings
from storage.database import close_database, init_database

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    logger.info("Binding to %s:%d (localhost only)", settings.host, settings.port)
    
    await init_database()
    logger.info("Database initialized at %s", settings.db_path)
    
    yield
    
    await close_database()
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Autocrypt peer state and encryption recommendation API",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(peers.router, prefix="/api/v1/peers", tags=["Peers"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
