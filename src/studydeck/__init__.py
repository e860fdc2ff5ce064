"""Flashcard and summary generation from PDF and Word documents."""

__version__ = "0.1.0"
