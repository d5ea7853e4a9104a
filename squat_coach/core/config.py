"""Core configuration and constants.

Uses environment variables for configuration. Follows PEP8 and Google style docstrings.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal
import os

from pydantic import BaseModel, model_validator


class Settings(BaseModel):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: App display name.
        environment: Runtime environment.
        api_host: Host for FastAPI server.
        api_port: Port for FastAPI server.
        log_level: Logging level string.
        log_file: Optional path of a rotating log file sink.
        squat_threshold: Knee angle below which a standing lifter enters the DOWN phase.
        stand_threshold: Knee angle above which a squatting lifter completes the rep.
        good_depth: Deepest-point knee angle at or below which a rep counts as good.
        error_cooldown_ms: Minimum gap between two announcements of the same form error.
    """

    app_name: str = "Squat Coach"
    environment: Literal["dev", "prod", "test"] = "dev"

    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str | None = os.getenv("LOG_FILE") or None

    exposed_origins: list[str] = (
        os.getenv("EXPOSED_ORIGINS", "*").split(",") if os.getenv("EXPOSED_ORIGINS") else ["*"]
    )

    # Rep state machine (degrees)
    squat_threshold: float = float(os.getenv("SQUAT_THRESHOLD", "130"))
    stand_threshold: float = float(os.getenv("STAND_THRESHOLD", "160"))
    good_depth: float = float(os.getenv("GOOD_DEPTH", "100"))
    very_deep_angle: float = float(os.getenv("VERY_DEEP_ANGLE", "70"))
    go_lower_angle: float = float(os.getenv("GO_LOWER_ANGLE", "120"))

    # Form classifier
    max_forward_lean: float = float(os.getenv("MAX_FORWARD_LEAN", "50"))
    lean_check_knee_angle: float = float(os.getenv("LEAN_CHECK_KNEE_ANGLE", "150"))
    knee_over_toes_threshold: float = float(os.getenv("KNEE_OVER_TOES_THRESHOLD", "15"))
    knee_check_angle: float = float(os.getenv("KNEE_CHECK_ANGLE", "140"))
    too_low_angle: float = float(os.getenv("TOO_LOW_ANGLE", "60"))

    # Visibility gate
    min_leg_visibility: float = float(os.getenv("MIN_LEG_VISIBILITY", "0.5"))
    min_shoulder_visibility: float = float(os.getenv("MIN_SHOULDER_VISIBILITY", "0.4"))

    # Feedback debouncing
    error_cooldown_ms: float = float(os.getenv("ERROR_COOLDOWN_MS", "4000"))

    @model_validator(mode="after")
    def _check_rep_thresholds(self) -> "Settings":
        if self.squat_threshold >= self.stand_threshold:
            raise ValueError("squat_threshold must be lower than stand_threshold")
        if self.error_cooldown_ms < 0:
            raise ValueError("error_cooldown_ms must be non-negative")
        return self

    def thresholds(self) -> dict[str, float]:
        """Return the tunable angle/visibility thresholds as a flat mapping."""

        return {
            "squat_threshold": self.squat_threshold,
            "stand_threshold": self.stand_threshold,
            "good_depth": self.good_depth,
            "very_deep_angle": self.very_deep_angle,
            "go_lower_angle": self.go_lower_angle,
            "max_forward_lean": self.max_forward_lean,
            "lean_check_knee_angle": self.lean_check_knee_angle,
            "knee_over_toes_threshold": self.knee_over_toes_threshold,
            "knee_check_angle": self.knee_check_angle,
            "too_low_angle": self.too_low_angle,
            "min_leg_visibility": self.min_leg_visibility,
            "min_shoulder_visibility": self.min_shoulder_visibility,
            "error_cooldown_ms": self.error_cooldown_ms,
        }


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
