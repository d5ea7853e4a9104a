"""Landmark frame data types using the MediaPipe Pose index vocabulary."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple

# MediaPipe Pose emits 33 landmarks per frame
LANDMARK_COUNT = 33

# Normalized coordinates may fall slightly outside the image; anything past
# this range is treated as garbage
COORD_MIN = -1.0
COORD_MAX = 2.0

LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12
LEFT_HIP = 23
RIGHT_HIP = 24
LEFT_KNEE = 25
RIGHT_KNEE = 26
LEFT_ANKLE = 27
RIGHT_ANKLE = 28

LANDMARK_NAMES = {
    LEFT_SHOULDER: "left_shoulder",
    RIGHT_SHOULDER: "right_shoulder",
    LEFT_HIP: "left_hip",
    RIGHT_HIP: "right_hip",
    LEFT_KNEE: "left_knee",
    RIGHT_KNEE: "right_knee",
    LEFT_ANKLE: "left_ankle",
    RIGHT_ANKLE: "right_ankle",
}


@dataclass(frozen=True)
class Keypoint:
    x: float
    y: float
    visibility: float

    @classmethod
    def missing(cls) -> "Keypoint":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def coerce(cls, raw: Any) -> "Keypoint":
        """Build a keypoint from a Keypoint, mapping or (x, y, visibility) sequence.

        Absent keypoints, non-finite or far out-of-frame coordinates and
        visibilities outside [0, 1] become a zero-visibility keypoint so the
        visibility gate rejects them.
        """
        if raw is None:
            return cls.missing()
        if isinstance(raw, Keypoint):
            x, y, vis = raw.x, raw.y, raw.visibility
        elif isinstance(raw, Mapping):
            x = raw.get("x")
            y = raw.get("y")
            vis = raw.get("visibility", raw.get("score"))
        else:
            try:
                x, y, vis = raw
            except (TypeError, ValueError):
                return cls.missing()
        try:
            x, y, vis = float(x), float(y), float(vis)
        except (TypeError, ValueError):
            return cls.missing()
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(vis)):
            return cls.missing()
        if not (COORD_MIN <= x <= COORD_MAX and COORD_MIN <= y <= COORD_MAX):
            return cls.missing()
        if not 0.0 <= vis <= 1.0:
            return cls(x, y, 0.0)
        return cls(x, y, vis)


@dataclass(frozen=True)
class LandmarkFrame:
    """One immutable sample of 33 pose keypoints; index meaning never changes."""

    keypoints: Tuple[Keypoint, ...]

    def __post_init__(self) -> None:
        if len(self.keypoints) != LANDMARK_COUNT:
            raise ValueError(
                f"expected {LANDMARK_COUNT} keypoints per frame, got {len(self.keypoints)}"
            )

    @classmethod
    def from_points(cls, points: Iterable[Optional[Any]]) -> "LandmarkFrame":
        return cls(tuple(Keypoint.coerce(p) for p in points))

    def __getitem__(self, idx: int) -> Keypoint:
        return self.keypoints[idx]

    def __len__(self) -> int:
        return len(self.keypoints)
