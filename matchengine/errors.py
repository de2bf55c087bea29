"""
Exceptions raised by the matching engine.

Missing data is never an error: dimension calculators fall back to the
neutral score instead. Invalid weight configurations are reported as
warnings and diagnostics, not exceptions.
"""

from typing import Optional


class MatchEngineError(Exception):
    """Base class for matching engine errors."""


class ConfigError(MatchEngineError):
    """Configuration file is missing, unparsable or invalid."""


class GeoCalculationError(MatchEngineError):
    """Coordinates are not usable for a distance calculation."""


class CandidateEvaluationError(MatchEngineError):
    """A single candidate in a batch could not be evaluated."""

    INVALID_RECORD = "invalid_record"
    EVALUATION_FAILED = "evaluation_failed"

    def __init__(self, reason_code: str, message: str, candidate_id: Optional[str] = None):
        super().__init__(message)
        self.reason_code = reason_code
        self.candidate_id = candidate_id

    def __str__(self) -> str:
        who = self.candidate_id or "<unknown>"
        return f"[{self.reason_code}] candidate {who}: {self.args[0]}"
