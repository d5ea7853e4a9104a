"""Vision package exports."""

from .form import FormError, classify
from .geometry import GeometryMetrics, calculate_angle
from .landmarks import Keypoint, LandmarkFrame
from .reps import Phase, RepRecord, RepStateMachine

__all__ = [
    "FormError",
    "GeometryMetrics",
    "Keypoint",
    "LandmarkFrame",
    "Phase",
    "RepRecord",
    "RepStateMachine",
    "calculate_angle",
    "classify",
]
