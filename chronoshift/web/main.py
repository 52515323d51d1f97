"""FastAPI application entry point."""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chronoshift.config.settings import get_settings
from chronoshift.data.database import init_db
from chronoshift.utils.logging import setup_logging
from .api import (
    conversions,
    deps,
    facts,
    logs as log_routes,
    meta as meta_routes,
    preferences,
    profiles,
    status as status_routes,
)

settings = get_settings()
setup_logging()
logger = logging.getLogger("chronoshift.web")

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add API routes first, before static file mounting
app.include_router(status_routes.router)
app.include_router(meta_routes.router)
app.include_router(conversions.router)
app.include_router(profiles.router)
app.include_router(preferences.router)
app.include_router(facts.router)
app.include_router(log_routes.router)

static_dir = Path(__file__).parent / "static"
index_file = static_dir / "index.html"
if static_dir.exists() and index_file.exists():
    app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
else:
    @app.get("/")
    async def index() -> dict:
        return {"message": "ChronoShift API running", "docs": "/docs", "health": "/health"}


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Initialising database")
    await init_db()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await deps.close_conversion_service()
