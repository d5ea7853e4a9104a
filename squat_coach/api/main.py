"""FastAPI application exposing REST endpoints for the squat coach.

Endpoints:
- POST /posture: apply one landmark frame (JSON)
- /session/*: start, stop, status and summary
- /tools/*: client tools for the voice agent
- GET /config: active thresholds

This module wires sub-routers from domain modules and provides a health check.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from squat_coach.core.config import get_settings
from squat_coach.api.routers.posture import router as posture_router
from squat_coach.api.routers.session import router as session_router
from squat_coach.api.routers.tools import router as tools_router
from squat_coach.api.routers.config_router import router as config_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    sink_id = None
    if settings.log_file:
        sink_id = logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="5 MB",
            retention="7 days",
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )
    logger.info("{} started environment={}", settings.app_name, settings.environment)
    yield
    if sink_id is not None:
        logger.remove(sink_id)


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.exposed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/health")
async def health() -> dict:
    """Return API health status."""

    return {"status": "ok"}


# Routers
app.include_router(posture_router, prefix="", tags=["posture"])
app.include_router(session_router, prefix="", tags=["session"])
app.include_router(tools_router, prefix="", tags=["tools"])
app.include_router(config_router, prefix="", tags=["config"])
