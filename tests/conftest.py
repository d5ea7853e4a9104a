from __future__ import annotations

import math
from typing import Callable, List, Optional

import pytest

from squat_coach.vision.landmarks import (
    LANDMARK_COUNT,
    LEFT_ANKLE,
    LEFT_HIP,
    LEFT_KNEE,
    LEFT_SHOULDER,
    RIGHT_ANKLE,
    RIGHT_HIP,
    RIGHT_KNEE,
    RIGHT_SHOULDER,
    LandmarkFrame,
)


def make_landmarks(
    knee_angle: float = 170.0,
    torso_lean: float = 10.0,
    visibility: float = 0.9,
    right_visibility: Optional[float] = None,
    knee_visibility: Optional[float] = None,
    shoulder_visibility: Optional[float] = None,
) -> List[dict]:
    """Side-profile pose with the requested knee angle and torso lean (degrees).

    The shin is vertical (knee straight above ankle) so knee-over-toes is 0.
    """
    a = math.radians(knee_angle)
    lean = math.radians(torso_lean)
    knee = (0.5, 0.6)
    ankle = (0.5, 0.85)
    hip = (knee[0] + 0.2 * math.sin(a), knee[1] + 0.2 * math.cos(a))
    shoulder = (hip[0] + 0.25 * math.sin(lean), hip[1] - 0.25 * math.cos(lean))

    right_visibility = visibility if right_visibility is None else right_visibility
    points = [{"x": 0.5, "y": 0.5, "visibility": 0.9} for _ in range(LANDMARK_COUNT)]
    for side_vis, (s, h, k, an) in (
        (visibility, (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE, LEFT_ANKLE)),
        (right_visibility, (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE)),
    ):
        points[s] = {"x": shoulder[0], "y": shoulder[1], "visibility": shoulder_visibility if shoulder_visibility is not None else side_vis}
        points[h] = {"x": hip[0], "y": hip[1], "visibility": side_vis}
        points[k] = {"x": knee[0], "y": knee[1], "visibility": knee_visibility if knee_visibility is not None else side_vis}
        points[an] = {"x": ankle[0], "y": ankle[1], "visibility": side_vis}
    return points


def make_frame(knee_angle: float = 170.0, **kwargs) -> LandmarkFrame:
    return LandmarkFrame.from_points(make_landmarks(knee_angle, **kwargs))


@pytest.fixture
def landmarks_factory() -> Callable[..., List[dict]]:
    return make_landmarks


@pytest.fixture
def frame_factory() -> Callable[..., LandmarkFrame]:
    return make_frame
