"""Scanner: discover files, match the catalog, apply the whitelist.

The scanner is a set of functions over explicit data. ``ScanRules`` bundles
the compiled catalog, the severity overrides and the suppression table; it is
built once per run, so a malformed pattern fails before any file is read.

Example:
    result = scan(ScanMode.FULL, Path("."))
    if not result.passed:
        print(f"Found {len(result.findings)} issues")
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from credguard.config import CredguardConfig, ScanConfig
from credguard.scanner.base import FindingSeverity, ScanFinding, ScanResult
from credguard.scanner.patterns import (
    DEFAULT_CATALOG,
    CredentialPattern,
    build_catalog,
    iter_matches,
    severity_for,
)
from credguard.scanner.whitelist import (
    DEFAULT_POLICY,
    SuppressionRule,
    build_policy,
    suppressing_rule,
    whitelist_from_mapping,
)
from credguard.utils.git import GitError, staged_files

logger = logging.getLogger(__name__)


class ScanMode(str, Enum):
    """Which files a scan covers."""

    STAGED = "staged"  # files staged for commit
    FULL = "full"  # the working tree


@dataclass(frozen=True)
class ScanRules:
    """Compiled catalog, severity overrides and suppression table."""

    catalog: tuple[CredentialPattern, ...] = DEFAULT_CATALOG
    severities: dict[str, FindingSeverity] = field(default_factory=dict)
    policy: tuple[SuppressionRule, ...] = DEFAULT_POLICY

    @classmethod
    def from_config(cls, scan_config: ScanConfig) -> ScanRules:
        """Build rules from configuration.

        Raises:
            CatalogError: If an extra pattern is malformed.
        """
        catalog, severities = build_catalog(scan_config.extra_patterns)
        policy = build_policy(whitelist_from_mapping(scan_config.whitelist))
        return cls(catalog=catalog, severities=severities, policy=policy)


def _is_text_candidate(path: Path, scan_config: ScanConfig) -> bool:
    name = path.name
    if any(fnmatch.fnmatch(name, pattern) for pattern in scan_config.exclude_files):
        return False
    if name == ".env" or name.startswith(".env."):
        return True
    return path.suffix.lower() in scan_config.extensions


def _walk_tree(root: Path, scan_config: ScanConfig, manifest_dir: str) -> list[Path]:
    manifest_rel = Path(manifest_dir).as_posix().strip("/")
    excluded_names = set(scan_config.exclude_dirs) | {Path(manifest_rel).name}

    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root)

        # Prune in place so os.walk does not descend; sort for determinism.
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d not in excluded_names and (rel_dir / d).as_posix() != manifest_rel
        )

        for filename in sorted(filenames):
            path = current / filename
            if _is_text_candidate(path, scan_config) and path.is_file():
                files.append(path)
    return files


def list_candidate_files(
    mode: ScanMode,
    root: Path,
    scan_config: ScanConfig | None = None,
    manifest_dir: str = ".secrets",
) -> list[Path]:
    """List files to scan, in a deterministic order.

    Staged mode returns every staged file that still exists, in git's order.
    Full mode walks ``root`` with sorted names, restricted to text-like
    extensions and skipping dependency caches, VCS metadata, the manifest
    directory, lockfiles and logs.

    Args:
        mode: Staged or full.
        root: Repository root.
        scan_config: Extension and exclusion lists (defaults if None).
        manifest_dir: Manifest directory relative to ``root``.

    Returns:
        Existing file paths under ``root``.
    """
    scan_config = scan_config or ScanConfig()

    if mode is ScanMode.STAGED:
        try:
            staged = staged_files(root)
        except GitError as e:
            logger.warning("Could not list staged files: %s", e)
            return []
        return [root / p for p in staged if (root / p).is_file()]

    return _walk_tree(root, scan_config, manifest_dir)


def _line_number(lines: list[str], content: str, text: str, offset: int) -> int:
    for index, line in enumerate(lines, start=1):
        if text in line:
            return index
    # Match spans a line break.
    return content.count("\n", 0, offset) + 1


def scan_file(
    path: Path,
    display_path: Path | None = None,
    rules: ScanRules | None = None,
) -> list[ScanFinding]:
    """Scan one file.

    Args:
        path: File to read.
        display_path: Path used for whitelisting and reporting (defaults to
            ``path``).
        rules: Catalog and policy (defaults if None).

    Returns:
        Unsuppressed findings in catalog order.

    Raises:
        OSError: If the file cannot be read.
    """
    rules = rules or ScanRules()
    display_path = display_path or path

    content = path.read_text(encoding="utf-8", errors="replace")
    lines = content.splitlines()

    findings: list[ScanFinding] = []
    for credential, m in iter_matches(content, rules.catalog):
        text = m.group(0)
        rule = suppressing_rule(display_path, credential.label, text, rules.policy)
        if rule is not None:
            logger.debug(
                "Suppressed %s in %s by %s", credential.label, display_path.as_posix(), rule
            )
            continue

        findings.append(
            ScanFinding(
                file_path=display_path,
                line_number=_line_number(lines, content, text, m.start()),
                label=credential.label,
                matched_text=text,
                severity=severity_for(credential.label, rules.severities),
            )
        )
    return findings


def _display_path(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def scan(
    mode: ScanMode,
    root: Path,
    config: CredguardConfig | None = None,
    rules: ScanRules | None = None,
) -> ScanResult:
    """Discover and scan files.

    A file that cannot be read is logged, recorded in ``errors`` and skipped;
    it never stops the scan of the others.

    Raises:
        CatalogError: If ``rules`` is None and the configured catalog is
            malformed. Raised before any file is read.
    """
    config = config or CredguardConfig()
    rules = rules or ScanRules.from_config(config.scan)

    result = ScanResult()
    files = list_candidate_files(mode, root, config.scan, config.manifests.directory)
    logger.debug("Scanning %d file(s) in %s mode", len(files), mode.value)

    for path in files:
        display = _display_path(path, root)
        try:
            findings = scan_file(path, display, rules)
        except OSError as e:
            logger.warning("Error scanning %s: %s", display.as_posix(), e)
            result.errors[display] = str(e)
            continue
        result.files_scanned.append(display)
        result.findings.extend(findings)

    return result
