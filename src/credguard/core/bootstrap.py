"""One-command setup: manifests, hooks, validation and a first audit.

The pipeline is safe to re-run. An existing manifest directory is left alone,
hooks are re-installed with backups, and validation and audit re-derive their
state from disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from credguard.audit.auditor import AuditReport, SecurityAuditor
from credguard.config import CredguardConfig
from credguard.core.manifests import template_for
from credguard.core.validator import EnvironmentValidator, ValidationResult
from credguard.integrations.git_hooks import install_hooks
from credguard.utils.git import GitError

logger = logging.getLogger(__name__)

MANIFEST_DIR_MODE = 0o700
MANIFEST_FILE_MODE = 0o600


class SetupError(Exception):
    """A setup step failed in a way that aborts the pipeline."""


class ManifestDirectoryError(SetupError):
    """The manifest directory or its templates could not be created."""


class HookInstallError(SetupError):
    """The git hooks could not be written."""


@dataclass
class SetupSummary:
    """What setup did, what needs attention and what to run next."""

    steps: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    validation: ValidationResult | None = None
    audit: AuditReport | None = None

    @property
    def complete(self) -> bool:
        return not self.warnings and not self.next_steps


class SetupOrchestrator:
    """Run the setup steps in order.

    Example:
        summary = SetupOrchestrator(Path(".")).run()
        for step in summary.next_steps:
            print(step)
    """

    def __init__(self, root: Path, config: CredguardConfig | None = None) -> None:
        self.root = root
        self.config = config or CredguardConfig()

    def run(self) -> SetupSummary:
        """Run every step.

        Raises:
            ManifestDirectoryError: If the manifest directory cannot be set up.
            HookInstallError: If the hooks cannot be installed.
        """
        summary = SetupSummary()
        self.setup_manifest_directory(summary)
        self.install_git_hooks(summary)
        self.validate_environment(summary)
        self.run_audit(summary)
        return summary

    def setup_manifest_directory(self, summary: SetupSummary) -> None:
        directory = self.config.manifests.directory
        manifest_dir = self.config.manifest_dir(self.root)

        if manifest_dir.is_dir():
            summary.steps.append(f"{directory}/ directory already exists")
            return

        try:
            manifest_dir.mkdir(parents=True, mode=MANIFEST_DIR_MODE)
            created = []
            for name, keys in self.config.manifests.schema.required.items():
                path = manifest_dir / name
                path.write_text(template_for(name, keys), encoding="utf-8")
                path.chmod(MANIFEST_FILE_MODE)
                created.append(name)
        except OSError as e:
            raise ManifestDirectoryError(f"Failed to set up {directory}/: {e}") from e

        logger.info("Created %s with templates: %s", manifest_dir, ", ".join(created))
        summary.steps.append(f"Created {directory}/ directory with {len(created)} template(s)")
        summary.next_steps.append(f"Fill in your actual credentials in {directory}/*.env files")

    def install_git_hooks(self, summary: SetupSummary) -> None:
        hooks_dir = self.config.hooks_dir(self.root)
        try:
            installed = install_hooks(hooks_dir)
        except OSError as e:
            raise HookInstallError(f"Failed to install hooks in {hooks_dir}: {e}") from e

        names = ", ".join(hook.name for hook in installed)
        summary.steps.append(f"Installed git security hooks ({names})")
        for hook in installed:
            if hook.backup_path is not None:
                summary.warnings.append(
                    f"Existing {hook.name} hook backed up to {hook.backup_path.name}"
                )

    def validate_environment(self, summary: SetupSummary) -> None:
        try:
            result = EnvironmentValidator(self.root, self.config).validate()
        except OSError as e:
            logger.warning("Environment validation failed: %s", e)
            summary.warnings.append(f"Environment validation could not run: {e}")
            summary.next_steps.append("Fix environment issues: credguard validate")
            return

        summary.validation = result
        if result.passed:
            summary.steps.append("Environment validation passed")
        else:
            summary.warnings.append(
                f"Environment validation found {len(result.errors)} error(s)"
            )
            summary.next_steps.append("Fix environment issues: credguard validate")

    def run_audit(self, summary: SetupSummary) -> None:
        try:
            report = SecurityAuditor(self.root, self.config).run()
        except (OSError, GitError) as e:
            logger.warning("Security audit failed: %s", e)
            summary.warnings.append(f"Security audit could not run: {e}")
            summary.next_steps.append("Address security issues: credguard audit --verbose")
            return

        summary.audit = report
        if report.passed:
            summary.steps.append(f"Security audit passed ({report.score}/100, {report.grade})")
        else:
            summary.warnings.append(
                f"Security audit found issues ({report.score}/100, {report.grade})"
            )
            summary.next_steps.append("Address security issues: credguard audit --verbose")
