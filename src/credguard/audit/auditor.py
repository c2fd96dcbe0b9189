"""Security audit: scanner + validator + repository hygiene, scored.

Checks run in a fixed order and each one is isolated: an I/O or git failure
inside a check is recorded as a LOW finding and the next check still runs.
Only a malformed pattern catalog aborts the audit, before anything is checked.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from credguard.audit.scoring import AuditFinding, compute_score, grade_for, is_passing
from credguard.config import CredguardConfig
from credguard.core.manifests import MANIFEST_SUFFIX, find_weak_values
from credguard.core.parser import ManifestParser
from credguard.core.validator import (
    EnvironmentValidator,
    ValidationResult,
    ignore_entry_for,
    read_gitignore,
)
from credguard.integrations.git_hooks import (
    ENFORCING_HOOKS,
    HOOKS,
    HookStatus,
    hook_status,
    install_hook,
)
from credguard.scanner.base import FindingSeverity, ScanResult
from credguard.scanner.engine import ScanMode, ScanRules, scan
from credguard.utils.git import GitError, recent_commit_messages, remote_urls

logger = logging.getLogger(__name__)

SECURITY_DOCS: tuple[str, ...] = (
    "SECURITY.md",
    "SECURITY_CHECKLIST.md",
    ".github/SECURITY.md",
    "docs/SECURITY.md",
)
GENERIC_SECRET_IGNORES: tuple[str, ...] = ("*.env", "*.key")
HISTORY_KEYWORDS = re.compile(r"password|secret|key|credential|token", re.IGNORECASE)

# Group/world read bits.
READABLE_BY_OTHERS = 0o044
MANIFEST_MODE = 0o600

_WEAK_VALUE_MESSAGES: dict[str, tuple[str, str | None]] = {
    "placeholder": ("Placeholder values found in {file}: {keys}", "Fill in real credentials"),
    "weak": ("Weak credential values in {file}: {keys}", "Rotate to strong, generated values"),
    "short-password": ("Suspiciously short passwords in {file}: {keys}", None),
    "short-key": ("Suspiciously short API keys in {file}: {keys}", None),
    "unquoted-whitespace": (
        "Unquoted values with spaces in {file}: {keys}",
        'Wrap the values in double quotes',
    ),
}


@dataclass
class AuditReport:
    """Everything an audit run produced."""

    findings: list[AuditFinding] = field(default_factory=list)
    fixes_applied: list[str] = field(default_factory=list)
    scan_result: ScanResult | None = None
    validation: ValidationResult | None = None

    @property
    def score(self) -> int:
        return compute_score(self.findings)

    @property
    def grade(self) -> str:
        return grade_for(self.score)

    @property
    def passed(self) -> bool:
        return is_passing(self.score)

    def by_severity(self, severity: FindingSeverity) -> list[AuditFinding]:
        return [f for f in self.findings if f.severity == severity]


class SecurityAuditor:
    """Run every audit check against a repository.

    Example:
        report = SecurityAuditor(Path(".")).run()
        print(report.score, report.grade)
    """

    def __init__(self, root: Path, config: CredguardConfig | None = None) -> None:
        self.root = root
        self.config = config or CredguardConfig()
        self.manifest_dir = self.config.manifest_dir(root)
        self.hooks_dir = self.config.hooks_dir(root)
        self.parser = ManifestParser()

    def run(self, fix: bool = False) -> AuditReport:
        """Run the audit.

        Args:
            fix: Apply safe automatic fixes before checking.

        Raises:
            CatalogError: If the configured pattern catalog is malformed.
        """
        rules = ScanRules.from_config(self.config.scan)
        report = AuditReport()

        if fix:
            self._apply_fixes(report)

        checks: list[tuple[str, str, Callable[[AuditReport], None]]] = [
            ("credential scan", "Credentials", lambda r: self._audit_scan(r, rules)),
            ("environment", "Environment", self._audit_environment),
            ("ignore rules", "Git", self._audit_ignore_rules),
            ("hooks", "Git", self._audit_hooks),
            ("commit history", "Git", self._audit_history),
            ("remotes", "Git", self._audit_remotes),
            ("file permissions", "Permissions", self._audit_permissions),
            ("credential strength", "Credentials", self._audit_credential_strength),
            ("documentation", "Documentation", self._audit_documentation),
        ]

        for name, category, check in checks:
            try:
                check(report)
            except (OSError, GitError) as e:
                logger.warning("Audit check '%s' failed: %s", name, e)
                report.findings.append(
                    AuditFinding(category, FindingSeverity.LOW, f"Unable to run {name} check: {e}")
                )

        return report

    def _rel(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def _manifest_files(self) -> list[Path]:
        if not self.manifest_dir.is_dir():
            return []
        return sorted(
            p for p in self.manifest_dir.iterdir() if p.is_file() and p.name.endswith(MANIFEST_SUFFIX)
        )

    # Checks

    def _audit_scan(self, report: AuditReport, rules: ScanRules) -> None:
        result = scan(ScanMode.FULL, self.root, self.config, rules)
        report.scan_result = result
        if not result.passed:
            report.findings.append(
                AuditFinding(
                    "Credentials",
                    FindingSeverity.CRITICAL,
                    f"Exposed credentials found in repository ({len(result.findings)} finding(s))",
                    "Run: credguard scan for details",
                )
            )

    def _audit_environment(self, report: AuditReport) -> None:
        result = EnvironmentValidator(self.root, self.config).validate()
        report.validation = result
        if not result.passed:
            report.findings.append(
                AuditFinding(
                    "Environment",
                    FindingSeverity.HIGH,
                    f"Environment validation failed ({len(result.errors)} error(s))",
                    "Run: credguard validate for details",
                )
            )

    def _critical_ignores(self) -> list[str]:
        return [ignore_entry_for(self.config.manifests.directory), *GENERIC_SECRET_IGNORES]

    def _audit_ignore_rules(self, report: AuditReport) -> None:
        gitignore = read_gitignore(self.root)
        if gitignore is None:
            report.findings.append(
                AuditFinding(
                    "Git",
                    FindingSeverity.HIGH,
                    "Missing .gitignore file",
                    "Run: credguard audit --fix",
                )
            )
            return

        for entry in self._critical_ignores():
            if entry not in gitignore:
                report.findings.append(
                    AuditFinding(
                        "Git",
                        FindingSeverity.CRITICAL,
                        f"Missing {entry} in .gitignore",
                        f'Add "{entry}" to .gitignore',
                    )
                )

        for entry in self.config.audit.recommended_ignores:
            if entry not in gitignore:
                report.findings.append(
                    AuditFinding("Git", FindingSeverity.LOW, f"Missing {entry} in .gitignore")
                )

    def _audit_hooks(self, report: AuditReport) -> None:
        for name in ENFORCING_HOOKS:
            status = hook_status(self.hooks_dir, name)
            if status is HookStatus.MISSING:
                report.findings.append(
                    AuditFinding(
                        "Git",
                        FindingSeverity.MEDIUM,
                        f"Missing {name} security hook",
                        "Run: credguard install-hooks",
                    )
                )
            elif status is HookStatus.FOREIGN:
                report.findings.append(
                    AuditFinding(
                        "Git",
                        FindingSeverity.MEDIUM,
                        f"{name} hook not security-enabled",
                        "Run: credguard install-hooks (the existing hook is backed up)",
                    )
                )

    def _audit_history(self, report: AuditReport) -> None:
        try:
            messages = recent_commit_messages(self.root, self.config.audit.history_depth)
        except GitError as e:
            logger.debug("git log failed: %s", e)
            report.findings.append(
                AuditFinding("Git", FindingSeverity.LOW, "Unable to check git history")
            )
            return

        sensitive = [m for m in messages if HISTORY_KEYWORDS.search(m)]
        if sensitive:
            report.findings.append(
                AuditFinding(
                    "Git",
                    FindingSeverity.HIGH,
                    f"Found {len(sensitive)} commit(s) mentioning credentials in the last "
                    f"{self.config.audit.history_depth}",
                    "Review commit history for exposed credentials",
                )
            )

    def _audit_remotes(self, report: AuditReport) -> None:
        try:
            urls = remote_urls(self.root)
        except GitError as e:
            logger.debug("git remote failed: %s", e)
            return

        https = [url for url in urls if url.startswith("https://")]
        if https:
            report.findings.append(
                AuditFinding(
                    "Git",
                    FindingSeverity.LOW,
                    f"Using HTTPS for git remote {https[0]} (consider SSH)",
                )
            )

    def _audit_permissions(self, report: AuditReport) -> None:
        if os.name == "nt":
            logger.debug("Skipping permission check on Windows")
            return

        for path in self._manifest_files():
            if path.stat().st_mode & READABLE_BY_OTHERS:
                rel = self._rel(path)
                report.findings.append(
                    AuditFinding(
                        "Permissions",
                        FindingSeverity.MEDIUM,
                        f"Credential file is group/world-readable: {rel}",
                        f"Run: chmod 600 {rel}",
                    )
                )

    def _audit_credential_strength(self, report: AuditReport) -> None:
        for path in self._manifest_files():
            rel = self._rel(path)
            try:
                manifest = self.parser.parse(path)
            except (OSError, UnicodeDecodeError) as e:
                report.findings.append(
                    AuditFinding("Credentials", FindingSeverity.LOW, f"Unable to read {rel}: {e}")
                )
                continue

            grouped: dict[str, list[str]] = {}
            severities: dict[str, FindingSeverity] = {}
            for issue in find_weak_values(path.name, manifest):
                grouped.setdefault(issue.kind, []).append(issue.key)
                severities[issue.kind] = issue.severity

            for kind, keys in grouped.items():
                template, remediation = _WEAK_VALUE_MESSAGES[kind]
                report.findings.append(
                    AuditFinding(
                        "Credentials",
                        severities[kind],
                        template.format(file=rel, keys=", ".join(keys)),
                        remediation,
                    )
                )

    def _audit_documentation(self, report: AuditReport) -> None:
        if not any((self.root / doc).is_file() for doc in SECURITY_DOCS):
            report.findings.append(
                AuditFinding(
                    "Documentation",
                    FindingSeverity.MEDIUM,
                    "No security documentation found",
                    "Create SECURITY.md with security policies and procedures",
                )
            )

        readme = self.root / "README.md"
        if readme.is_file():
            if "security" not in readme.read_text(encoding="utf-8", errors="replace").lower():
                report.findings.append(
                    AuditFinding(
                        "Documentation", FindingSeverity.LOW, "README.md missing security information"
                    )
                )

    # Fixes

    def _apply_fixes(self, report: AuditReport) -> None:
        for name, fixer in (
            ("ignore rules", self._fix_ignore_rules),
            ("permissions", self._fix_permissions),
            ("hooks", self._fix_hooks),
        ):
            try:
                fixer(report)
            except OSError as e:
                logger.warning("Automatic fix for %s failed: %s", name, e)
                report.findings.append(
                    AuditFinding("Fix", FindingSeverity.LOW, f"Unable to fix {name}: {e}")
                )

    def _fix_ignore_rules(self, report: AuditReport) -> None:
        gitignore_path = self.root / ".gitignore"
        current = read_gitignore(self.root) or ""
        missing = [entry for entry in self._critical_ignores() if entry not in current]
        if not missing:
            return

        prefix = "" if not current or current.endswith("\n") else "\n"
        block = prefix + "# credentials\n" + "".join(f"{entry}\n" for entry in missing)
        with open(gitignore_path, "a", encoding="utf-8") as f:
            f.write(block)
        report.fixes_applied.extend(f"Added {entry} to .gitignore" for entry in missing)

    def _fix_permissions(self, report: AuditReport) -> None:
        if os.name == "nt":
            return
        for path in self._manifest_files():
            if path.stat().st_mode & READABLE_BY_OTHERS:
                path.chmod(MANIFEST_MODE)
                report.fixes_applied.append(f"Restricted {self._rel(path)} to owner (600)")

    def _fix_hooks(self, report: AuditReport) -> None:
        for hook in HOOKS:
            if hook.name in ENFORCING_HOOKS and (
                hook_status(self.hooks_dir, hook.name) is HookStatus.MISSING
            ):
                self.hooks_dir.mkdir(parents=True, exist_ok=True)
                install_hook(self.hooks_dir, hook)
                report.fixes_applied.append(f"Installed {hook.name} hook")
