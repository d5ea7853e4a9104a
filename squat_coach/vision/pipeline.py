"""Per-frame squat analysis pipeline with rep counting and session accounting."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Union

from loguru import logger

from squat_coach.core.config import Settings, get_settings
from squat_coach.session.aggregator import SessionAggregator, SessionSummary

from .debounce import ErrorDebouncer
from .form import COACH_CUES, FormThresholds, classify
from .geometry import GeometryMetrics, evaluate, round_half_up
from .landmarks import LandmarkFrame
from .reps import Phase, RepRecord, RepStateMachine, RepThresholds
from .visibility import LOW_VISIBILITY_FEEDBACK, VisibilityThresholds, is_analyzable, select_side


@dataclass(frozen=True)
class FrameResult:
    analyzable: bool
    rep_count: int
    knee_angle: int
    phase: Phase
    feedback: str
    feedback_code: str
    is_good_form: bool
    side: Optional[str] = None
    metrics: Optional[GeometryMetrics] = None
    rep: Optional[RepRecord] = None
    coach_message: Optional[str] = None
    latency_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "analyzable": self.analyzable,
            "rep_count": self.rep_count,
            "knee_angle": self.knee_angle,
            "phase": self.phase.value,
            "feedback": self.feedback,
            "feedback_code": self.feedback_code,
            "is_good_form": self.is_good_form,
            "side": self.side,
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "rep": self.rep.to_dict() if self.rep else None,
            "coach_message": self.coach_message,
            "latency_ms": self.latency_ms,
        }


@dataclass(frozen=True)
class SquatStatus:
    """One consistent snapshot for the analysis tool and the session status endpoint."""

    rep_count: int
    knee_angle: int
    feedback: str
    is_good_form: bool
    phase: Phase
    feedback_code: str = "idle"
    frames_processed: int = 0
    frames_rejected: int = 0

    def to_tool_payload(self) -> dict:
        return {
            "squat_count": self.rep_count,
            "current_knee_angle": self.knee_angle,
            "feedback_string": self.feedback,
            "is_form_good": self.is_good_form,
            "movement_stage": self.phase.value,
        }


class SquatAnalyzer:
    """Runs gate -> geometry -> form -> reps -> debounce -> session for each frame.

    Frames must be handed over one at a time in arrival order; a lock keeps
    calls from different threads totally ordered. There is no queue: callers
    that produce frames faster than this can process them drop frames first.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._visibility = VisibilityThresholds.from_settings(self.settings)
        self._form = FormThresholds.from_settings(self.settings)
        self.reps = RepStateMachine(RepThresholds.from_settings(self.settings))
        self.debouncer = ErrorDebouncer(self.settings.error_cooldown_ms)
        self.session = SessionAggregator()
        self._lock = threading.Lock()
        self.knee_angle: int = 180
        self.feedback: str = self.reps.feedback
        self.feedback_code: str = self.reps.feedback_code
        self.frames_processed: int = 0
        self.frames_rejected: int = 0

    # --- Public API -----------------------------------------------------

    def process_frame(
        self,
        frame: Union[LandmarkFrame, Iterable[Any]],
        now_ms: Optional[float] = None,
    ) -> FrameResult:
        """Apply one landmark frame and return what the display should show."""
        if not isinstance(frame, LandmarkFrame):
            frame = LandmarkFrame.from_points(frame)
        if now_ms is None:
            now_ms = time.time() * 1000.0
        with self._lock:
            start = time.perf_counter()
            result = self._apply(frame, float(now_ms))
            latency_ms = (time.perf_counter() - start) * 1000.0
        return replace(result, latency_ms=round(latency_ms, 3))

    def status(self) -> SquatStatus:
        with self._lock:
            return SquatStatus(
                rep_count=self.reps.rep_count,
                knee_angle=self.knee_angle,
                feedback=self.feedback,
                is_good_form=self.reps.good_form,
                phase=self.reps.phase,
                feedback_code=self.feedback_code,
                frames_processed=self.frames_processed,
                frames_rejected=self.frames_rejected,
            )

    def reset_session(self, now: Optional[float] = None) -> None:
        """Start a fresh session: phase UP, zero counters, debounce cleared."""
        with self._lock:
            self.reps.reset()
            self.debouncer.reset()
            self.session.reset(now)
            self.knee_angle = 180
            self.feedback = self.reps.feedback
            self.feedback_code = self.reps.feedback_code
            self.frames_processed = 0
            self.frames_rejected = 0
        logger.info("Squat session reset")

    def summarize(self, now: Optional[float] = None) -> SessionSummary:
        with self._lock:
            return self.session.summarize(now)

    # --- Internal helpers -----------------------------------------------

    def _apply(self, frame: LandmarkFrame, now_ms: float) -> FrameResult:
        side = select_side(frame)
        if not is_analyzable(side, self._visibility):
            self.frames_rejected += 1
            self.feedback = LOW_VISIBILITY_FEEDBACK
            self.feedback_code = "low_visibility"
            return FrameResult(
                analyzable=False,
                rep_count=self.reps.rep_count,
                knee_angle=self.knee_angle,
                phase=self.reps.phase,
                feedback=self.feedback,
                feedback_code=self.feedback_code,
                is_good_form=self.reps.good_form,
                side=side.name,
            )

        self.frames_processed += 1
        metrics = evaluate(side)
        angle = metrics.knee_angle_deg
        self.knee_angle = round_half_up(angle)
        self.session.observe_angle(angle)

        errors = classify(metrics, self._form)
        update = self.reps.step(angle, errors)
        logger.debug(
            "angle={:.1f} torso={:.0f} knee_toe={:.1f} phase={} side={}",
            angle,
            metrics.torso_lean_deg,
            metrics.knee_over_toes,
            update.phase.value,
            side.name,
        )

        coach_message: Optional[str] = None
        if self.debouncer.update(update.error, now_ms):
            coach_message = COACH_CUES[update.error]
            self.session.record_error(update.error)
            logger.info("Form correction: {}", coach_message)

        if update.rep is not None:
            self.session.record_rep(update.rep)
            if not update.rep.good_form:
                # Shallow reps have no dedicated bucket
                self.session.record_error(None)

        self.feedback = update.feedback
        self.feedback_code = update.feedback_code
        return FrameResult(
            analyzable=True,
            rep_count=self.reps.rep_count,
            knee_angle=self.knee_angle,
            phase=update.phase,
            feedback=update.feedback,
            feedback_code=update.feedback_code,
            is_good_form=update.good_form,
            side=side.name,
            metrics=metrics,
            rep=update.rep,
            coach_message=coach_message,
        )
