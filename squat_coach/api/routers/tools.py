"""Client-tool endpoints called by the conversational voice agent.

Both tools take no parameters; they only read the analyzer state.
"""
from __future__ import annotations

from fastapi import APIRouter
from loguru import logger

from squat_coach.api.schemas import Envelope, SquatAnalysisOutput
from squat_coach.api.routers.posture import analyzer
from squat_coach.api.routers.session import session_summary

router = APIRouter(prefix="/tools")


@router.post("/get_squat_analysis", response_model=Envelope)
async def get_squat_analysis() -> Envelope:
    """Current squat count, knee angle and form feedback."""
    payload = SquatAnalysisOutput.model_validate(analyzer.status().to_tool_payload())
    logger.debug("tool get_squat_analysis -> {}", payload.model_dump())
    return Envelope(success=True, data=payload.model_dump())


@router.post("/get_session_summary", response_model=Envelope)
async def get_session_summary() -> Envelope:
    """Complete session summary with all stats."""
    return await session_summary()
