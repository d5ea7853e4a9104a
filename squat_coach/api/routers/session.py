"""Session control endpoints.

Provides start/stop controls, the live status and the end-of-session summary.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter
from loguru import logger

from squat_coach.api.schemas import Envelope, SessionSummaryOutput
from squat_coach.api.routers.posture import analyzer

router = APIRouter()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _summary_payload(now: Optional[datetime] = None) -> dict[str, Any]:
    now = now or _now()
    summary = analyzer.summarize(now.timestamp())
    payload = SessionSummaryOutput.model_validate(
        {**summary.to_dict(), "voice_prompt": summary.voice_prompt()}
    )
    return payload.model_dump()


_state: dict[str, Any] = {
    "started_at": None,
    "status": "idle",
    "last_summary": None,
}


@router.post("/session/start", response_model=Envelope)
async def session_start() -> Envelope:
    now = _now()
    analyzer.reset_session(now.timestamp())
    _state.update({"started_at": now, "status": "active", "last_summary": None})
    logger.info("Session started")
    return Envelope(success=True, data={"status": "active", "started_at": now.isoformat()})


@router.post("/session/stop", response_model=Envelope)
async def session_stop() -> Envelope:
    if not isinstance(_state.get("started_at"), datetime):
        return Envelope(success=False, error="no_active_session")
    summary = _summary_payload()
    _state.update({"started_at": None, "status": "idle", "last_summary": summary})
    logger.info(
        "Session stopped duration={} reps={} score={} main_issue={}",
        summary["duration"],
        summary["total_reps"],
        summary["form_score"],
        summary["main_issue"],
    )
    return Envelope(success=True, data=summary)


@router.get("/session/status", response_model=Envelope)
async def session_status() -> Envelope:
    started = _state.get("started_at")
    now = _now()
    duration = max(0, int((now - started).total_seconds())) if isinstance(started, datetime) else 0
    status = analyzer.status()
    return Envelope(
        success=True,
        data={
            "status": _state.get("status"),
            "rep_count": status.rep_count,
            "knee_angle": status.knee_angle,
            "phase": status.phase.value,
            "feedback": status.feedback,
            "feedback_code": status.feedback_code,
            "is_good_form": status.is_good_form,
            "started_at": started.isoformat() if isinstance(started, datetime) else None,
            "duration_sec": duration,
            "frames_processed": status.frames_processed,
            "frames_rejected": status.frames_rejected,
            "session_summary": _state.get("last_summary"),
        },
    )


@router.get("/session/summary", response_model=Envelope)
async def session_summary() -> Envelope:
    if isinstance(_state.get("started_at"), datetime):
        return Envelope(success=True, data=_summary_payload())
    if _state.get("last_summary"):
        return Envelope(success=True, data=_state["last_summary"])
    return Envelope(success=False, error="no_active_session")
