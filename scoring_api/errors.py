# scoring_api/errors.py
from __future__ import annotations


class ScoringError(Exception):
    """Base for recoverable scoring conditions surfaced to the caller."""
    pass


class NoStrikerError(ScoringError):
    """Raised when a delivery is recorded with no not-out batsman on strike."""
    pass


class MatchCompletedError(ScoringError):
    """Raised by any mutating call once the match is complete."""
    pass


class InvalidSelectionError(ScoringError):
    """Raised when a batsman/bowler choice violates eligibility rules."""
    pass


class AllOutError(ScoringError):
    """
    No batting candidates remain.
    Not a failure: the caller should end the innings.
    """
    pass


class InvalidLineupError(ScoringError):
    """Raised when opening batsmen/bowler are missing, duplicated or ineligible."""
    pass


class PendingInputError(ScoringError):
    """Raised when a delivery is attempted while the engine awaits other input."""

    def __init__(self, pending: str, message: str = "") -> None:
        self.pending = pending
        super().__init__(message or f"Awaiting input: {pending}")
