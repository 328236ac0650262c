"""FastAPI application for the SourceScan registry.

Provides REST API endpoints wrapping the SourceScan Python package for:
- Ownership (initialize, get/set owner)
- Contract registration, lookup, listing and search
- Votes and comments on registered contracts
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the sourcescan package is importable by adding the project root to sys.path.
_project_root = str(Path(__file__).resolve().parents[3])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sourcescan import __version__
from web.backend.app.routers import registry

app = FastAPI(
    title="SourceScan API",
    description=(
        "REST API for the SourceScan registry of verified contract builds. "
        "Provides endpoints for contract registration, search, votes and comments."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(registry.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "SourceScan API",
        "version": __version__,
        "description": "Verified contract registry REST API",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
