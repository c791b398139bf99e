"""
Error taxonomy for the quiz import pipeline.

Only ladder exhaustion and total structure-discovery failure stop a platform
flow; the orchestrator turns both into a DiscoveryReport instead of letting
them escape.
"""

from typing import List, Optional


class QuizImportError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(QuizImportError):
    """Raised when the settings file cannot be used."""


class TransportBlocked(QuizImportError):
    """Every fetch agent returned a challenge page, an error or a too-small payload."""

    def __init__(self, message: str, attempts: Optional[List] = None):
        super().__init__(message)
        self.attempts = attempts or []


class NoStructureFound(QuizImportError):
    """Content was retrieved but no candidate question array was found."""

    def __init__(self, message: str, reason: str = "no_candidate_arrays"):
        super().__init__(message)
        self.reason = reason


class PartialData(QuizImportError):
    """A quiz was produced but at least one question needs repair."""

    def __init__(self, message: str, flagged: int = 0):
        super().__init__(message)
        self.flagged = flagged


class PlatformUnrecognized(QuizImportError):
    """The URL does not belong to any supported platform."""
