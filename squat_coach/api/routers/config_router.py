"""Config endpoint router exposing the active analysis thresholds (read-only)."""
from __future__ import annotations

from fastapi import APIRouter

from squat_coach.api.schemas import Envelope, ConfigOutput
from squat_coach.api.routers.posture import analyzer

router = APIRouter()


@router.get("/config", response_model=Envelope)
async def get_config() -> Envelope:
    out = ConfigOutput.model_validate(analyzer.settings.thresholds())
    return Envelope(success=True, data=out.model_dump())
