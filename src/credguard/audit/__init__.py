"""Repository security audit with a 0-100 score."""

from credguard.audit.auditor import AuditReport, SecurityAuditor
from credguard.audit.scoring import AuditFinding, compute_score, grade_for, is_passing

__all__ = [
    "AuditFinding",
    "AuditReport",
    "SecurityAuditor",
    "compute_score",
    "grade_for",
    "is_passing",
]
