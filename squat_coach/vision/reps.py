"""Squat repetition state machine.

Two phases with hysteresis: the knee angle must drop below the squat threshold
to enter DOWN and rise above the stand threshold to complete the rep, so jitter
between the two thresholds never counts twice. Each ``step`` reads the phase
once and transitions at most once.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from loguru import logger

from .geometry import round_half_up
from .form import ERROR_CODES, ERROR_FEEDBACK, FormError, primary_error

# Per-rep minimum before any DOWN frame has been seen
UNREACHED_ANGLE = 180.0

IDLE_FEEDBACK = "Ready to start"


class Phase(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class RepThresholds:
    squat: float = 130.0
    stand: float = 160.0
    good_depth: float = 100.0
    very_deep: float = 70.0
    go_lower: float = 120.0

    @classmethod
    def from_settings(cls, settings) -> "RepThresholds":
        return cls(
            squat=float(settings.squat_threshold),
            stand=float(settings.stand_threshold),
            good_depth=float(settings.good_depth),
            very_deep=float(settings.very_deep_angle),
            go_lower=float(settings.go_lower_angle),
        )


@dataclass(frozen=True)
class RepRecord:
    rep_index: int
    depth_angle_deg: float
    good_form: bool

    def to_dict(self) -> dict:
        return {
            "rep_index": self.rep_index,
            "depth_angle_deg": round(self.depth_angle_deg, 1),
            "good_form": self.good_form,
        }


@dataclass(frozen=True)
class RepUpdate:
    phase: Phase
    feedback: str
    feedback_code: str
    good_form: bool
    error: FormError = FormError.NONE
    rep: Optional[RepRecord] = None


class RepStateMachine:
    """Turns a per-frame knee angle into phases, feedback and rep records."""

    def __init__(self, thresholds: RepThresholds = RepThresholds()) -> None:
        self.thresholds = thresholds
        self.reset()

    def reset(self) -> None:
        self.phase: Phase = Phase.UP
        self.rep_count: int = 0
        self.min_angle: float = UNREACHED_ANGLE
        self.feedback: str = IDLE_FEEDBACK
        self.feedback_code: str = "idle"
        self.good_form: bool = True

    def step(self, knee_angle: float, errors: Sequence[FormError] = ()) -> RepUpdate:
        th = self.thresholds
        error = FormError.NONE
        rep: Optional[RepRecord] = None

        if self.phase is Phase.UP:
            self.min_angle = UNREACHED_ANGLE
            if knee_angle < th.squat:
                self.phase = Phase.DOWN
                self._say("going_down", "Going down... Keep your chest up!", True)
                logger.debug("Phase UP -> DOWN at {:.1f} deg", knee_angle)
            else:
                self._say("ready", "Ready - Squat down with control!", True)
        else:
            self.min_angle = min(self.min_angle, knee_angle)

            error = primary_error(errors)
            if error is not FormError.NONE:
                self._say(ERROR_CODES[error], ERROR_FEEDBACK[error], False)
            elif knee_angle < th.very_deep:
                self._say("very_deep", "Very deep! Control the movement!", True)
            elif knee_angle < th.good_depth:
                self._say("perfect_depth", "Perfect depth! Great form! Push up!", True)
            elif knee_angle < th.go_lower:
                self._say("go_lower", "Go a bit lower for full range!", True)
            elif knee_angle < th.stand:
                self._say("push_through_heels", "Push through your heels!", True)

            if knee_angle > th.stand:
                rep = self._complete_rep()
                error = FormError.NONE

        return RepUpdate(
            phase=self.phase,
            feedback=self.feedback,
            feedback_code=self.feedback_code,
            good_form=self.good_form,
            error=error,
            rep=rep,
        )

    def _complete_rep(self) -> RepRecord:
        self.phase = Phase.UP
        self.rep_count += 1
        depth = self.min_angle
        good = depth <= self.thresholds.good_depth
        shown = round_half_up(depth)
        if good:
            self._say("rep_complete", f"Excellent rep! Great depth ({shown}°)", True)
        else:
            self._say("rep_shallow", f"Rep done! But go deeper next time ({shown}°)", False)
        logger.info("Rep {} completed depth={:.1f} good={}", self.rep_count, depth, good)
        return RepRecord(rep_index=self.rep_count, depth_angle_deg=depth, good_form=good)

    def _say(self, code: str, message: str, good_form: bool) -> None:
        self.feedback_code = code
        self.feedback = message
        self.good_form = good_form
