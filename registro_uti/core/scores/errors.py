"""Structured validation results and errors raised by the scoring engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

__all__ = [
    "DOMAIN_RANGE",
    "EXCLUSIVE_GROUP",
    "MISSING_DISCRIMINATOR",
    "DomainRangeError",
    "ExclusiveGroupError",
    "MissingDiscriminatorError",
    "ScoringError",
    "ValidationResult",
    "Violation",
]

DOMAIN_RANGE = "domain_range"
EXCLUSIVE_GROUP = "exclusive_group"
MISSING_DISCRIMINATOR = "missing_discriminator"


@dataclass(frozen=True)
class Violation:
    """A single rejected input, identified by a machine-readable reason."""

    reason: str
    message: str
    field: Optional[str] = None
    group: Optional[str] = None
    items: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["items"] = list(self.items)
        return data


@dataclass(frozen=True)
class ValidationResult:
    violations: Tuple[Violation, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.violations

    @classmethod
    def collect(cls, violations: Sequence[Violation]) -> "ValidationResult":
        return cls(violations=tuple(violations))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(violations=self.violations + other.violations)

    def raise_for_violations(self) -> None:
        """Raise the error matching the first violation's reason, if any."""

        if self.ok:
            return
        error_cls = _ERRORS_BY_REASON.get(self.violations[0].reason, ScoringError)
        raise error_cls(self.violations)


class ScoringError(Exception):
    """Base error: the input cannot be scored. Carries every violation found."""

    reason = "invalid_input"

    def __init__(self, violations: Sequence[Violation]):
        self.violations: List[Violation] = list(violations)
        message = "; ".join(v.message for v in self.violations) or self.reason
        super().__init__(message)

    @property
    def group(self) -> Optional[str]:
        for violation in self.violations:
            if violation.group:
                return violation.group
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason": self.reason,
            "message": str(self),
            "violations": [violation.to_dict() for violation in self.violations],
        }


class DomainRangeError(ScoringError):
    reason = DOMAIN_RANGE


class ExclusiveGroupError(ScoringError):
    reason = EXCLUSIVE_GROUP


class MissingDiscriminatorError(ScoringError):
    reason = MISSING_DISCRIMINATOR


_ERRORS_BY_REASON = {
    DOMAIN_RANGE: DomainRangeError,
    EXCLUSIVE_GROUP: ExclusiveGroupError,
    MISSING_DISCRIMINATOR: MissingDiscriminatorError,
}
