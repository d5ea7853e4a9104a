"""Squat coach: rep counting, form feedback and session summaries from pose keypoints."""

__version__ = "0.1.0"
