"""Rate limiting for spoken form corrections.

A new kind of error is announced immediately; the same unresolved error is
repeated at most once per cooldown window. Time is always passed in by the
caller.
"""
from __future__ import annotations

from loguru import logger

from .form import FormError


class ErrorDebouncer:
    def __init__(self, cooldown_ms: float = 4000.0) -> None:
        self.cooldown_ms = float(cooldown_ms)
        self.reset()

    def reset(self) -> None:
        self.last_kind: FormError = FormError.NONE
        self.last_ts_ms: float = float("-inf")

    def update(self, kind: FormError, now_ms: float) -> bool:
        """Return True when ``kind`` should be announced at ``now_ms``."""
        if kind is FormError.NONE:
            # Good form in between lets the next error (even a repeat) fire at once
            self.last_kind = FormError.NONE
            return False
        if kind is not self.last_kind or (now_ms - self.last_ts_ms) > self.cooldown_ms:
            self.last_kind = kind
            self.last_ts_ms = now_ms
            return True
        logger.debug("Form error {} suppressed (cooldown)", kind.value)
        return False
