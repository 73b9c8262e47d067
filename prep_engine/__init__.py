"""Adaptive exam-prep engine: mastery tracking, revision scheduling and study planning."""

__version__ = "0.1.0"
