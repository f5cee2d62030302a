"""
CinemaVault Backend API - FastAPI application.

Provides endpoints for:
- Browsing, searching and filtering popular movies
- Movie details and TMDb reviews
- Directors aggregated from popular movies' credits, with name search
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.deps import get_director_store
from api.routers import directors, movies

logger = logging.getLogger(__name__)


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Set CORS_ALLOW_ORIGINS as comma-separated list of origins.
    Example: CORS_ALLOW_ORIGINS=https://cinemavault.example,https://www.cinemavault.example
    """
    origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
    if not origins_str:
        return []
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting up CinemaVault API...")
    yield
    logger.info("Shutting down CinemaVault API...")
    get_director_store().clear()


app = FastAPI(
    title="CinemaVault API",
    description="Backend API for CinemaVault - movie and director browsing over TMDb",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
# If no origins configured, allows all origins but disables credentials
cors_origins = get_cors_origins()
allow_credentials = len(cors_origins) > 0

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(movies.router, prefix="/api/v1")
app.include_router(directors.router, prefix="/api/v1")


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "cinemavault"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
