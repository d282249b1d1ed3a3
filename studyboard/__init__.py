"""Gamification progress engine for the student dashboard."""

__version__ = "1.0.0"
