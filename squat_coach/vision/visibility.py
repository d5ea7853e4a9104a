"""Side selection and tracking-confidence gate."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .landmarks import (
    LEFT_ANKLE,
    LEFT_HIP,
    LEFT_KNEE,
    LEFT_SHOULDER,
    RIGHT_ANKLE,
    RIGHT_HIP,
    RIGHT_KNEE,
    RIGHT_SHOULDER,
    Keypoint,
    LandmarkFrame,
)

LOW_VISIBILITY_FEEDBACK = "Cannot see you clearly - adjust position"


@dataclass(frozen=True)
class VisibilityThresholds:
    min_leg: float = 0.5
    min_shoulder: float = 0.4

    @classmethod
    def from_settings(cls, settings) -> "VisibilityThresholds":
        return cls(
            min_leg=float(settings.min_leg_visibility),
            min_shoulder=float(settings.min_shoulder_visibility),
        )


@dataclass(frozen=True)
class BodySide:
    name: Literal["left", "right"]
    shoulder: Keypoint
    hip: Keypoint
    knee: Keypoint
    ankle: Keypoint

    @property
    def leg_visibility(self) -> float:
        return (self.hip.visibility + self.knee.visibility + self.ankle.visibility) / 3.0


def _side(frame: LandmarkFrame, name: Literal["left", "right"]) -> BodySide:
    if name == "left":
        return BodySide("left", frame[LEFT_SHOULDER], frame[LEFT_HIP], frame[LEFT_KNEE], frame[LEFT_ANKLE])
    return BodySide("right", frame[RIGHT_SHOULDER], frame[RIGHT_HIP], frame[RIGHT_KNEE], frame[RIGHT_ANKLE])


def select_side(frame: LandmarkFrame) -> BodySide:
    """Pick the body side whose hip/knee/ankle are better tracked (ties go left)."""
    left = _side(frame, "left")
    right = _side(frame, "right")
    return right if right.leg_visibility > left.leg_visibility else left


def is_analyzable(side: BodySide, thresholds: VisibilityThresholds = VisibilityThresholds()) -> bool:
    return (
        side.hip.visibility > thresholds.min_leg
        and side.knee.visibility > thresholds.min_leg
        and side.ankle.visibility > thresholds.min_leg
        and side.shoulder.visibility > thresholds.min_shoulder
    )
