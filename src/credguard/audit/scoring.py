"""Audit findings, score and grade."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from credguard.scanner.base import FindingSeverity

MAX_SCORE = 100
PASS_THRESHOLD = 80

SEVERITY_PENALTY: dict[FindingSeverity, int] = {
    FindingSeverity.CRITICAL: 25,
    FindingSeverity.HIGH: 10,
    FindingSeverity.MEDIUM: 5,
    FindingSeverity.LOW: 2,
}

# (minimum score, grade), checked top to bottom
GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (95, "A+"),
    (90, "A"),
    (85, "B+"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)
FAILING_GRADE = "F"


@dataclass(frozen=True)
class AuditFinding:
    """One issue found by an audit check."""

    category: str
    severity: FindingSeverity
    message: str
    remediation: str | None = None


def compute_score(findings: Iterable[AuditFinding]) -> int:
    """Start at 100, subtract each finding's penalty, clamp to [0, 100]."""
    penalty = sum(SEVERITY_PENALTY[finding.severity] for finding in findings)
    return max(0, min(MAX_SCORE, MAX_SCORE - penalty))


def grade_for(score: int) -> str:
    """Letter grade for a score."""
    for minimum, grade in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return FAILING_GRADE


def is_passing(score: int) -> bool:
    return score >= PASS_THRESHOLD
