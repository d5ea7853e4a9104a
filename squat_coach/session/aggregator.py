"""Session statistics and the end-of-session summary.

The aggregator is owned by a single controller: it is reset when a session
starts, mutated on rep/error events and read when producing a summary. A
:class:`SessionSummary` is a frozen snapshot and never changes afterwards.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from loguru import logger

from squat_coach.vision.form import FormError
from squat_coach.vision.geometry import round_half_up
from squat_coach.vision.reps import UNREACHED_ANGLE, RepRecord

ERROR_BUCKETS = ("back", "knees", "too_low", "other")

_BUCKET_FOR_ERROR = {
    FormError.BACK_LEAN: "back",
    FormError.KNEES_FORWARD: "knees",
    FormError.TOO_LOW: "too_low",
}

# Tie-break order when picking the main issue
_ISSUE_PRIORITY = (
    ("back", FormError.BACK_LEAN),
    ("knees", FormError.KNEES_FORWARD),
    ("too_low", FormError.TOO_LOW),
)

ISSUE_LABELS = {
    FormError.BACK_LEAN.value: "Forward lean (back)",
    FormError.KNEES_FORWARD.value: "Knees over toes",
    FormError.TOO_LOW.value: "Going too deep",
}

NO_ISSUE = "None"


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}m {secs}s"


@dataclass(frozen=True)
class SessionSummary:
    duration: str
    duration_sec: int
    total_reps: int
    good_form_reps: int
    bad_form_reps: int
    form_score: int
    best_depth: int
    total_errors: int
    errors: Dict[str, int]
    main_issue: str

    @property
    def main_issue_label(self) -> str:
        return ISSUE_LABELS.get(self.main_issue, NO_ISSUE)

    def voice_prompt(self) -> str:
        """Sentence asking the voice agent to read the summary out loud."""
        return (
            f"Session complete! Give a vocal summary: {self.total_reps} squats in {self.duration}, "
            f"form score {self.form_score}%, best depth {self.best_depth}°, "
            f"main issue: {self.main_issue_label}. Give an encouraging summary in English!"
        )

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "duration_sec": self.duration_sec,
            "total_reps": self.total_reps,
            "good_form_reps": self.good_form_reps,
            "bad_form_reps": self.bad_form_reps,
            "form_score": self.form_score,
            "best_depth": self.best_depth,
            "total_errors": self.total_errors,
            "errors": dict(self.errors),
            "main_issue": self.main_issue,
            "main_issue_label": self.main_issue_label,
        }


@dataclass
class SessionStats:
    start_time: Optional[float] = None
    total_reps: int = 0
    good_form_reps: int = 0
    bad_form_reps: int = 0
    errors: Dict[str, int] = field(default_factory=lambda: {b: 0 for b in ERROR_BUCKETS})
    min_angle_seen: float = UNREACHED_ANGLE


class SessionAggregator:
    def __init__(self) -> None:
        self.stats = SessionStats()

    @property
    def started(self) -> bool:
        return self.stats.start_time is not None

    def reset(self, now: Optional[float] = None) -> None:
        """Clear all counters and mark the session start (seconds, wall clock)."""
        self.stats = SessionStats(start_time=time.time() if now is None else float(now))
        logger.info("Session stats reset")

    def record_rep(self, record: RepRecord) -> None:
        self.stats.total_reps += 1
        if record.good_form:
            self.stats.good_form_reps += 1
        else:
            self.stats.bad_form_reps += 1

    def record_error(self, kind: Optional[FormError] = None) -> None:
        """Count one error; kinds without a dedicated bucket land in ``other``."""
        bucket = _BUCKET_FOR_ERROR.get(kind, "other") if kind is not None else "other"
        self.stats.errors[bucket] += 1

    def observe_angle(self, angle: float) -> None:
        if angle < self.stats.min_angle_seen:
            self.stats.min_angle_seen = angle

    def summarize(self, now: Optional[float] = None) -> SessionSummary:
        s = self.stats
        now = time.time() if now is None else float(now)
        duration_sec = round_half_up(now - s.start_time) if s.start_time is not None else 0
        duration_sec = max(0, duration_sec)
        form_score = round_half_up(s.good_form_reps / s.total_reps * 100) if s.total_reps > 0 else 0
        return SessionSummary(
            duration=format_duration(duration_sec),
            duration_sec=duration_sec,
            total_reps=s.total_reps,
            good_form_reps=s.good_form_reps,
            bad_form_reps=s.bad_form_reps,
            form_score=int(form_score),
            best_depth=round_half_up(s.min_angle_seen),
            total_errors=sum(s.errors.values()),
            errors=dict(s.errors),
            main_issue=main_issue(s.errors),
        )


def main_issue(errors: Dict[str, int]) -> str:
    """Name of the most frequent form error, ``"None"`` when nothing was flagged."""
    best = max(errors.get(bucket, 0) for bucket, _ in _ISSUE_PRIORITY)
    if best <= 0:
        return NO_ISSUE
    for bucket, kind in _ISSUE_PRIORITY:
        if errors.get(bucket, 0) == best:
            return kind.value
    return NO_ISSUE
