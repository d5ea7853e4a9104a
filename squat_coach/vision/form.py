"""Form error classification for the squat.

Errors are evaluated independently but reported in a fixed priority order
(back lean, knees forward, too low); the first one is what gets surfaced.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from .geometry import GeometryMetrics


class FormError(str, Enum):
    NONE = "NONE"
    BACK_LEAN = "BACK_LEAN"
    KNEES_FORWARD = "KNEES_FORWARD"
    TOO_LOW = "TOO_LOW"


PRIORITY = (FormError.BACK_LEAN, FormError.KNEES_FORWARD, FormError.TOO_LOW)

# On-screen feedback per error
ERROR_FEEDBACK = {
    FormError.BACK_LEAN: "BACK: Leaning too far forward! Keep chest up!",
    FormError.KNEES_FORWARD: "KNEES: Going too far over toes! Sit back more!",
    FormError.TOO_LOW: "TOO LOW! Rise up to protect your lower back!",
}

# Short spoken cues handed to the voice agent
COACH_CUES = {
    FormError.BACK_LEAN: "Back leaning forward, chest up!",
    FormError.KNEES_FORWARD: "Knees too far forward, sit back!",
    FormError.TOO_LOW: "Too deep, come up!",
}

ERROR_CODES = {
    FormError.BACK_LEAN: "back_lean",
    FormError.KNEES_FORWARD: "knees_forward",
    FormError.TOO_LOW: "too_low",
}


@dataclass(frozen=True)
class FormThresholds:
    max_forward_lean: float = 50.0
    lean_check_knee_angle: float = 150.0
    knee_over_toes: float = 15.0
    knee_check_angle: float = 140.0
    too_low_angle: float = 60.0

    @classmethod
    def from_settings(cls, settings) -> "FormThresholds":
        return cls(
            max_forward_lean=float(settings.max_forward_lean),
            lean_check_knee_angle=float(settings.lean_check_knee_angle),
            knee_over_toes=float(settings.knee_over_toes_threshold),
            knee_check_angle=float(settings.knee_check_angle),
            too_low_angle=float(settings.too_low_angle),
        )


def classify(metrics: GeometryMetrics, thresholds: FormThresholds = FormThresholds()) -> List[FormError]:
    """Return every active form error, highest priority first."""
    errors: List[FormError] = []
    angle = metrics.knee_angle_deg
    # Some forward lean is normal while squatting; only flag it once the knees bend
    if metrics.torso_lean_deg > thresholds.max_forward_lean and angle < thresholds.lean_check_knee_angle:
        errors.append(FormError.BACK_LEAN)
    if metrics.knee_over_toes > thresholds.knee_over_toes and angle < thresholds.knee_check_angle:
        errors.append(FormError.KNEES_FORWARD)
    if angle < thresholds.too_low_angle:
        errors.append(FormError.TOO_LOW)
    return errors


def primary_error(errors: Sequence[FormError]) -> FormError:
    active = [e for e in errors if e is not FormError.NONE]
    if not active:
        return FormError.NONE
    return min(active, key=PRIORITY.index)
