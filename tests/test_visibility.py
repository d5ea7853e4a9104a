from __future__ import annotations

import math

import pytest

from squat_coach.vision.landmarks import (
    LANDMARK_COUNT,
    LEFT_KNEE,
    RIGHT_KNEE,
    Keypoint,
    LandmarkFrame,
)
from squat_coach.vision.visibility import is_analyzable, select_side


def test_frame_rejects_wrong_keypoint_count():
    with pytest.raises(ValueError):
        LandmarkFrame.from_points([(0.5, 0.5, 1.0)] * 12)
    with pytest.raises(ValueError):
        LandmarkFrame.from_points([(0.5, 0.5, 1.0)] * (LANDMARK_COUNT + 1))


def test_missing_and_invalid_keypoints_become_invisible():
    assert Keypoint.coerce(None).visibility == 0.0
    assert Keypoint.coerce({"x": 0.5, "y": 0.5}).visibility == 0.0
    assert Keypoint.coerce({"x": math.nan, "y": 0.5, "visibility": 0.9}).visibility == 0.0
    assert Keypoint.coerce((0.5, 0.5, 1.7)).visibility == 0.0
    assert Keypoint.coerce("garbage").visibility == 0.0
    assert Keypoint.coerce((0.4, 0.6, 0.8)) == Keypoint(0.4, 0.6, 0.8)


def test_side_selection_prefers_better_tracked_side(frame_factory):
    assert select_side(frame_factory(visibility=0.6, right_visibility=0.9)).name == "right"
    assert select_side(frame_factory(visibility=0.9, right_visibility=0.6)).name == "left"


def test_side_selection_tie_goes_left(frame_factory):
    assert select_side(frame_factory(visibility=0.8, right_visibility=0.8)).name == "left"


def test_gate_passes_well_tracked_side(frame_factory):
    assert is_analyzable(select_side(frame_factory()))


def test_gate_thresholds_are_strict(frame_factory):
    assert not is_analyzable(select_side(frame_factory(knee_visibility=0.5)))
    assert not is_analyzable(select_side(frame_factory(shoulder_visibility=0.4)))
    assert is_analyzable(select_side(frame_factory(shoulder_visibility=0.41)))


def test_gate_rejects_low_knee_visibility(frame_factory):
    assert not is_analyzable(select_side(frame_factory(knee_visibility=0.3)))


def test_missing_knee_routes_to_rejection(landmarks_factory):
    points = landmarks_factory()
    points[LEFT_KNEE] = None
    points[RIGHT_KNEE] = None
    frame = LandmarkFrame.from_points(points)
    assert not is_analyzable(select_side(frame))


def test_far_out_of_frame_coordinates_become_invisible():
    assert Keypoint.coerce({"x": 1e308, "y": 0.5, "visibility": 0.9}).visibility == 0.0
    assert Keypoint.coerce((0.5, -3.0, 0.9)).visibility == 0.0
    # slightly outside the image is still a real detection
    assert Keypoint.coerce((1.2, -0.1, 0.9)) == Keypoint(1.2, -0.1, 0.9)


def test_runaway_knee_coordinates_route_to_rejection(landmarks_factory):
    points = landmarks_factory()
    points[LEFT_KNEE] = {"x": 1e308, "y": 0.6, "visibility": 0.9}
    points[RIGHT_KNEE] = {"x": 1e308, "y": 0.6, "visibility": 0.9}
    assert not is_analyzable(select_side(LandmarkFrame.from_points(points)))
