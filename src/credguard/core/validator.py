"""Environment validation: are the credential manifests present and sane?

Errors make validation fail; warnings never do. A missing optional manifest,
a placeholder value or a missing hook is a warning. A missing manifest
directory, a missing required manifest or key, or a manifest directory that is
not git-ignored is an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from credguard.config import CredguardConfig
from credguard.core.manifests import MANIFEST_SUFFIX, find_weak_values, missing_keys
from credguard.core.parser import ManifestParser, ParsedManifest
from credguard.integrations.git_hooks import HookStatus, hook_status

logger = logging.getLogger(__name__)


def ignore_entry_for(directory: str) -> str:
    """The ignore-file entry that excludes the manifest directory."""
    return directory.strip("/") + "/"


def read_gitignore(root: Path) -> str | None:
    """Return the contents of ``root/.gitignore``, or None if it is absent."""
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return None
    return gitignore.read_text(encoding="utf-8", errors="replace")


@dataclass
class ValidationResult:
    """Outcome of an environment validation."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    validated: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """Validation passes when no error was recorded."""
        return not self.errors


class EnvironmentValidator:
    """Validate the credential manifests and the git safety net around them.

    Example:
        result = EnvironmentValidator(Path(".")).validate()
        if not result.passed:
            for error in result.errors:
                print(error)
    """

    def __init__(self, root: Path, config: CredguardConfig | None = None) -> None:
        self.root = root
        self.config = config or CredguardConfig()
        self.manifest_dir = self.config.manifest_dir(root)
        self.parser = ManifestParser()
        self._parsed: dict[str, ParsedManifest | None] = {}

    def validate(self) -> ValidationResult:
        """Run every check and return the aggregated result."""
        result = ValidationResult()
        self._parsed = {}

        if not self._check_directory(result):
            return result

        schema = self.config.manifests.schema
        for name, keys in schema.required.items():
            self._check_manifest(name, keys, optional=False, result=result)
        for name, keys in schema.optional.items():
            self._check_manifest(name, keys, optional=True, result=result)

        self._check_weak_values(result)
        self._check_git_hygiene(result)
        return result

    def _check_directory(self, result: ValidationResult) -> bool:
        directory = self.config.manifests.directory
        if not self.manifest_dir.is_dir():
            result.errors.append(
                f"Missing {directory}/ directory - create it to store credentials safely"
            )
            return False

        try:
            empty = not any(self.manifest_dir.iterdir())
        except OSError as e:
            logger.warning("Failed to list %s: %s", self.manifest_dir, e)
            result.errors.append(f"Unable to read {directory}/ directory: {e}")
            return False

        if empty:
            result.errors.append(f"{directory}/ directory is empty - no credential files found")
            return False

        return True

    def _parse(self, name: str, optional: bool, result: ValidationResult) -> ParsedManifest | None:
        if name in self._parsed:
            return self._parsed[name]

        manifest: ParsedManifest | None
        try:
            manifest = self.parser.parse(self.manifest_dir / name)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read manifest %s: %s", name, e)
            (result.warnings if optional else result.errors).append(
                f"Failed to read {name}: {e}"
            )
            manifest = None

        self._parsed[name] = manifest
        return manifest

    def _check_manifest(
        self, name: str, keys: tuple[str, ...], optional: bool, result: ValidationResult
    ) -> None:
        bucket = result.warnings if optional else result.errors

        if not (self.manifest_dir / name).is_file():
            bucket.append(f"Missing credential file: {name}")
            return

        manifest = self._parse(name, optional, result)
        if manifest is None:
            return

        missing = missing_keys(manifest, keys)
        if missing:
            bucket.append(f"{name} missing variables: {', '.join(missing)}")

        present = [key for key in keys if key not in missing]
        if present:
            result.validated.append(f"{name}: {', '.join(present)}")

    def _check_weak_values(self, result: ValidationResult) -> None:
        directory = self.config.manifests.directory
        schema = self.config.manifests.schema

        for path in sorted(self.manifest_dir.iterdir()):
            if not path.is_file():
                continue
            if not path.name.endswith(MANIFEST_SUFFIX):
                result.warnings.append(
                    f"Non-{MANIFEST_SUFFIX} file in {directory}/: {path.name} "
                    f"(should be *{MANIFEST_SUFFIX})"
                )
                continue

            manifest = self._parse(path.name, path.name not in schema.required, result)
            if manifest is None:
                continue
            result.warnings.extend(issue.message for issue in find_weak_values(path.name, manifest))

    def _check_git_hygiene(self, result: ValidationResult) -> None:
        entry = ignore_entry_for(self.config.manifests.directory)
        try:
            gitignore = read_gitignore(self.root)
        except OSError as e:
            result.errors.append(f"Unable to read .gitignore: {e}")
        else:
            if gitignore is None:
                result.errors.append(
                    f"No .gitignore found - {entry} is not ignored, credentials could be exposed!"
                )
            elif entry not in gitignore:
                result.errors.append(
                    f"{entry} directory is not in .gitignore - credentials could be exposed!"
                )

        hooks_dir = self.config.hooks_dir(self.root)
        try:
            status = hook_status(hooks_dir, "pre-commit")
        except OSError as e:
            result.warnings.append(f"Unable to read pre-commit hook: {e}")
            return

        if status is HookStatus.MISSING:
            result.warnings.append(
                "No pre-commit security hook installed - run: credguard install-hooks"
            )
        elif status is HookStatus.FOREIGN:
            result.warnings.append("Pre-commit hook exists but not security-enabled")
