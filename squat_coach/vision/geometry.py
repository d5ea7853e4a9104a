"""Planar joint geometry for squat analysis.

All points are normalized image coordinates (origin top-left, y grows downward).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import TYPE_CHECKING

import numpy as np

from .landmarks import Keypoint

if TYPE_CHECKING:  # pragma: no cover
    from .visibility import BodySide


@dataclass(frozen=True)
class GeometryMetrics:
    knee_angle_deg: float
    torso_lean_deg: float
    knee_over_toes: float

    @property
    def knee_angle_display(self) -> int:
        return round_half_up(self.knee_angle_deg)

    def to_dict(self) -> dict:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (display rounding)."""
    return int(math.floor(value + 0.5))


def calculate_angle(a: Keypoint, b: Keypoint, c: Keypoint) -> float:
    """Angle at vertex ``b`` formed by ``a-b-c`` in degrees, within [0, 180].

    Coincident points give 0.0 since atan2(0, 0) is 0 for both rays.
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = float(np.abs(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def torso_lean(shoulder: Keypoint, hip: Keypoint) -> float:
    """Angle of the hip->shoulder vector from vertical (0 = upright)."""
    # y is inverted in image space, so "up" is hip.y - shoulder.y
    return float(np.abs(np.degrees(np.arctan2(shoulder.x - hip.x, hip.y - shoulder.y))))


def knee_over_toes(knee: Keypoint, ankle: Keypoint) -> float:
    """Signed forward knee travel; positive when the knee is ahead of the ankle."""
    return (knee.x - ankle.x) * 100.0


def evaluate(side: "BodySide") -> GeometryMetrics:
    return GeometryMetrics(
        knee_angle_deg=calculate_angle(side.hip, side.knee, side.ankle),
        torso_lean_deg=torso_lean(side.shoulder, side.hip),
        knee_over_toes=knee_over_toes(side.knee, side.ankle),
    )
