"""Main FastAPI application."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from model_tracker import __version__
from model_tracker.config import settings
from model_tracker.routers.errors import handle_error
from model_tracker.services.cache_service import CacheService
from model_tracker.services.exceptions import ModelTrackerError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Model Tracker API",
    description="Daily model portfolio ingestion, change alerts and analysis",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# One cache per process, injected into services through get_cache
app.state.cache = CacheService()

app.add_exception_handler(ModelTrackerError, handle_error)
app.add_exception_handler(Exception, handle_error)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Model Tracker API", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from model_tracker.routers import (
    accounts,
    analysis,
    cache,
    change_alerts,
    combined_accounts,
    watch_list,
)

app.include_router(change_alerts.router)
app.include_router(combined_accounts.router)
app.include_router(accounts.router)
app.include_router(watch_list.router)
app.include_router(analysis.router)
app.include_router(cache.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
