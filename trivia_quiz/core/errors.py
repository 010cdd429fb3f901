from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz errors."""


class SourceUnavailable(QuizError):
    """The trivia source failed, timed out, or returned nothing usable."""
