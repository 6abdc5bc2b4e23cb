"""Clinical scoring engine: APACHE II, NAS and kinesiology categorization."""

from .engine import ScoringEngine, engine
from .errors import (
    DomainRangeError,
    ExclusiveGroupError,
    MissingDiscriminatorError,
    ScoringError,
    ValidationResult,
    Violation,
)
from .registry import UnknownScoreError, available_scores, run_score

__all__ = [
    "DomainRangeError",
    "ExclusiveGroupError",
    "MissingDiscriminatorError",
    "ScoringEngine",
    "ScoringError",
    "UnknownScoreError",
    "ValidationResult",
    "Violation",
    "available_scores",
    "engine",
    "run_score",
]
