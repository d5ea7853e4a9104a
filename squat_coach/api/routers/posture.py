"""Posture analysis endpoint router.

Receives one landmark frame per call from the pose tracker and runs it through
the squat analyzer.
"""
from __future__ import annotations

from fastapi import APIRouter
from loguru import logger

from squat_coach.api.schemas import Envelope, PostureInput, PostureOutput
from squat_coach.vision.pipeline import SquatAnalyzer

router = APIRouter()

analyzer = SquatAnalyzer()


@router.post("/posture", response_model=Envelope)
async def posture_endpoint(payload: PostureInput) -> Envelope:
    """Apply one frame and return count, angle, phase and feedback."""
    points = [lm.model_dump() if lm is not None else None for lm in payload.landmarks]
    result = analyzer.process_frame(points, now_ms=payload.timestamp_ms)
    if result.rep is not None:
        logger.info(
            "posture rep={} depth={:.1f} good={}",
            result.rep_count,
            result.rep.depth_angle_deg,
            result.rep.good_form,
        )
    out = PostureOutput.model_validate(result.to_dict())
    return Envelope(success=True, data=out.model_dump())
