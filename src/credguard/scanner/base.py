"""Core data types shared by the scanner, validator and auditor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FindingSeverity(str, Enum):
    """Severity of a finding, ordered CRITICAL > HIGH > MEDIUM > LOW."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is more severe."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, FindingSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, FindingSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, FindingSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, FindingSeverity):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str) -> FindingSeverity:
        """Parse a severity name case-insensitively.

        Raises:
            ValueError: If the name is not a known severity.
        """
        return cls(value.strip().upper())


_SEVERITY_RANK: dict[FindingSeverity, int] = {
    FindingSeverity.LOW: 1,
    FindingSeverity.MEDIUM: 2,
    FindingSeverity.HIGH: 3,
    FindingSeverity.CRITICAL: 4,
}

# Most severe first; used for report grouping.
SEVERITY_ORDER: tuple[FindingSeverity, ...] = (
    FindingSeverity.CRITICAL,
    FindingSeverity.HIGH,
    FindingSeverity.MEDIUM,
    FindingSeverity.LOW,
)


@dataclass(frozen=True)
class ScanFinding:
    """One unsuppressed match of a credential pattern.

    Attributes:
        file_path: Path of the file, relative to the scan root where possible.
        line_number: 1-based line of the match.
        label: Label of the pattern that matched (e.g. "OpenAI API Key").
        matched_text: The full matched text.
        severity: Severity from the label table.
    """

    file_path: Path
    line_number: int
    label: str
    matched_text: str
    severity: FindingSeverity

    @property
    def location(self) -> str:
        """Return ``path:line``."""
        return f"{self.file_path.as_posix()}:{self.line_number}"


@dataclass
class ScanResult:
    """Result of one scan invocation.

    Attributes:
        findings: Findings in file-discovery order, then catalog order.
        files_scanned: Files that were read successfully.
        errors: Files that could not be read, with the error message.
    """

    findings: list[ScanFinding] = field(default_factory=list)
    files_scanned: list[Path] = field(default_factory=list)
    errors: dict[Path, str] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        """A scan passes when there are no findings."""
        return not self.findings

    @property
    def exit_code(self) -> int:
        """Exit code for strict mode."""
        return 0 if self.passed else 1

    def by_severity(self, severity: FindingSeverity) -> list[ScanFinding]:
        """Return findings of one severity, preserving order."""
        return [f for f in self.findings if f.severity == severity]
