"""Exam simulator: question selection, attempt tracking and scoring."""

__version__ = "1.0.0"
