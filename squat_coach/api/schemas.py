"""Pydantic schemas for request/response payloads.

All endpoints use a standardized JSON envelope: {"success": bool, "data": any, "error": str|None}
"""
from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Optional, List

from squat_coach.vision.landmarks import LANDMARK_COUNT


class Envelope(BaseModel):
    success: bool = True
    data: Optional[dict] = None
    error: Optional[str] = None


class KeypointIn(BaseModel):
    # Missing or out-of-range values are tolerated here; the engine marks the
    # keypoint invisible and the visibility gate rejects the frame
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    visibility: Optional[float] = None


class PostureInput(BaseModel):
    landmarks: List[Optional[KeypointIn]] = Field(min_length=LANDMARK_COUNT, max_length=LANDMARK_COUNT)
    timestamp_ms: Optional[float] = None


class Metrics(BaseModel):
    knee_angle_deg: float
    torso_lean_deg: float
    knee_over_toes: float


class RepOut(BaseModel):
    rep_index: int
    depth_angle_deg: float
    good_form: bool


class PostureOutput(BaseModel):
    analyzable: bool
    rep_count: int
    knee_angle: int
    phase: str
    feedback: str
    feedback_code: str
    is_good_form: bool
    side: str | None = None
    metrics: Metrics | None = None
    rep: RepOut | None = None
    coach_message: str | None = None
    latency_ms: float | None = None


class SquatAnalysisOutput(BaseModel):
    squat_count: int
    current_knee_angle: int
    feedback_string: str
    is_form_good: bool
    movement_stage: str


class ErrorCounts(BaseModel):
    back: int = 0
    knees: int = 0
    too_low: int = 0
    other: int = 0


class SessionSummaryOutput(BaseModel):
    duration: str
    duration_sec: int
    total_reps: int
    good_form_reps: int
    bad_form_reps: int
    form_score: int = Field(ge=0, le=100)
    best_depth: int
    total_errors: int
    errors: ErrorCounts
    main_issue: str
    main_issue_label: str
    voice_prompt: str | None = None


class ConfigOutput(BaseModel):
    squat_threshold: float
    stand_threshold: float
    good_depth: float
    very_deep_angle: float
    go_lower_angle: float
    max_forward_lean: float
    lean_check_knee_angle: float
    knee_over_toes_threshold: float
    knee_check_angle: float
    too_low_angle: float
    min_leg_visibility: float
    min_shoulder_visibility: float
    error_cooldown_ms: float
