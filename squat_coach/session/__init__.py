"""Session accounting exports."""

from .aggregator import SessionAggregator, SessionSummary

__all__ = ["SessionAggregator", "SessionSummary"]
