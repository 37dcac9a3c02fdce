# -*- coding: utf-8 -*-
"""
Workout log API

Workout records, weekly/monthly reports and trainee/coach sync.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .realtime.feed import sync_feed, websocket_endpoint
from .reports.api import router as reports_router
from .workouts.api import router as workouts_router
from .workouts.api import sync_router
from .workouts.deps import services

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Workout Log",
    description="Training records, weekly/monthly reports, coach sync",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _startup() -> None:
    services.local.init()
    migrated = await services.repository().migrate_legacy(services.legacy)
    if migrated:
        logger.info("Startup migration replayed %d legacy workouts", migrated)
    await sync_feed.bind(services.sync_codes.get())


@app.on_event("shutdown")
async def _shutdown() -> None:
    await sync_feed.close()


# Ensure the DB exists even when lifespan events are not triggered (e.g. some test clients).
services.local.init()


app.include_router(workouts_router)
app.include_router(sync_router)
app.include_router(reports_router)


@app.get("/api/health")
def health():
    return {"status": "ok", "remote": services.replica is not None}


@app.websocket("/ws/workouts")
async def workouts_feed(websocket: WebSocket):
    await websocket_endpoint(websocket)


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    host = os.environ.get("FITLOG_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("FITLOG_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("fitlog.api:app", host=host, port=port, reload=False)
