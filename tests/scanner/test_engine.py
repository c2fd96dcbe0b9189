"""Tests for credguard.scanner.engine."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from credguard.config import CredguardConfig, ScanConfig
from credguard.scanner.base import FindingSeverity
from credguard.scanner.engine import (
    ScanMode,
    ScanRules,
    list_candidate_files,
    scan,
    scan_file,
)
from credguard.scanner.patterns import OPENAI_API_KEY, CatalogError
from credguard.utils.git import GitError


def _write(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestListCandidateFiles:
    """Tests for file discovery."""

    def test_full_mode_is_sorted_and_filtered(self, tmp_path: Path):
        _write(tmp_path, "b.py", "")
        _write(tmp_path, "a.md", "")
        _write(tmp_path, "image.png", "")
        _write(tmp_path, "sub/c.js", "")
        _write(tmp_path, ".env", "")
        _write(tmp_path, ".env.local", "")

        files = list_candidate_files(ScanMode.FULL, tmp_path)
        rel = [f.relative_to(tmp_path).as_posix() for f in files]

        assert rel == [".env", ".env.local", "a.md", "b.py", "sub/c.js"]

    def test_excluded_directories_pruned(self, tmp_path: Path):
        _write(tmp_path, "node_modules/pkg/index.js", "")
        _write(tmp_path, ".git/config.txt", "")
        _write(tmp_path, ".secrets/github.env", "")
        _write(tmp_path, "memory/notes.md", "")
        _write(tmp_path, "src/app.py", "")

        files = list_candidate_files(ScanMode.FULL, tmp_path)

        assert files == [tmp_path / "src" / "app.py"]

    def test_lockfiles_and_logs_skipped(self, tmp_path: Path):
        _write(tmp_path, "package-lock.json", "")
        _write(tmp_path, "debug.log", "")
        _write(tmp_path, "package.json", "")

        files = list_candidate_files(ScanMode.FULL, tmp_path)

        assert files == [tmp_path / "package.json"]

    def test_custom_manifest_dir_pruned(self, tmp_path: Path):
        _write(tmp_path, "creds/api.env", "")
        _write(tmp_path, "main.py", "")

        files = list_candidate_files(ScanMode.FULL, tmp_path, ScanConfig(), "creds")

        assert files == [tmp_path / "main.py"]

    def test_staged_mode_uses_git(self, tmp_path: Path, monkeypatch):
        _write(tmp_path, "staged.py", "")
        monkeypatch.setattr(
            "credguard.scanner.engine.staged_files",
            lambda root: [Path("staged.py"), Path("deleted.py")],
        )

        files = list_candidate_files(ScanMode.STAGED, tmp_path)

        assert files == [tmp_path / "staged.py"]

    def test_staged_mode_git_failure_is_empty(self, tmp_path: Path, monkeypatch):
        def fail(root):
            raise GitError("not a git repository")

        monkeypatch.setattr("credguard.scanner.engine.staged_files", fail)

        assert list_candidate_files(ScanMode.STAGED, tmp_path) == []


class TestScanFile:
    """Tests for scan_file."""

    def test_finding_fields(self, tmp_path: Path, openai_key):
        path = _write(tmp_path, "client.py", f"import openai\n\nKEY = {openai_key}\n")

        findings = scan_file(path, Path("client.py"))

        assert len(findings) == 1
        finding = findings[0]
        assert finding.label == OPENAI_API_KEY
        assert finding.severity is FindingSeverity.CRITICAL
        assert finding.line_number == 3
        assert finding.matched_text == openai_key
        assert finding.location == "client.py:3"

    def test_whitelisted_label_suppressed_for_every_match(self, tmp_path: Path):
        content = "\n".join(f"contact: person{i}@corp.io" for i in range(5))
        path = _write(tmp_path, "IDENTITY.md", content)

        assert scan_file(path, Path("IDENTITY.md")) == []

    def test_same_text_reports_first_line(self, tmp_path: Path, github_token):
        path = _write(tmp_path, "a.txt", f"first {github_token}\nsecond {github_token}\n")

        findings = scan_file(path, Path("a.txt"))

        assert [f.line_number for f in findings] == [1, 1]

    def test_multiline_match_uses_offset(self, tmp_path: Path):
        rules = ScanRules.from_config(
            ScanConfig(extra_patterns=[{"label": "Block", "regex": r"BEGIN\nEND"}])
        )
        path = _write(tmp_path, "key.txt", "x\ny\nBEGIN\nEND\n")

        findings = scan_file(path, Path("key.txt"), rules)

        assert [(f.label, f.line_number) for f in findings] == [("Block", 3)]

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            scan_file(tmp_path / "gone.py")


class TestScan:
    """Tests for scan."""

    def test_clean_tree_passes(self, tmp_path: Path):
        _write(tmp_path, "app.py", "print('hello')\n")
        _write(tmp_path, "README.md", "# Hello\n")

        result = scan(ScanMode.FULL, tmp_path)

        assert result.passed
        assert result.exit_code == 0
        assert result.findings == []
        assert result.files_scanned == [Path("README.md"), Path("app.py")]

    def test_findings_in_discovery_order(self, tmp_path: Path, openai_key, github_token):
        _write(tmp_path, "b.py", github_token)
        _write(tmp_path, "a.py", openai_key)

        result = scan(ScanMode.FULL, tmp_path)

        assert [f.file_path for f in result.findings] == [Path("a.py"), Path("b.py")]
        assert not result.passed
        assert result.exit_code == 1

    def test_unreadable_file_recorded_and_skipped(self, tmp_path: Path, monkeypatch, openai_key):
        _write(tmp_path, "bad.py", "")
        _write(tmp_path, "good.py", openai_key)

        real_scan_file = scan_file

        def flaky(path, display_path=None, rules=None):
            if path.name == "bad.py":
                raise PermissionError("denied")
            return real_scan_file(path, display_path, rules)

        monkeypatch.setattr("credguard.scanner.engine.scan_file", flaky)

        result = scan(ScanMode.FULL, tmp_path)

        assert Path("bad.py") in result.errors
        assert result.files_scanned == [Path("good.py")]
        assert len(result.findings) == 1

    def test_config_whitelist_applies(self, tmp_path: Path, openai_key):
        _write(tmp_path, "fixtures/keys.txt", openai_key)
        config = CredguardConfig(scan=ScanConfig(whitelist={"fixtures/": [OPENAI_API_KEY]}))

        assert scan(ScanMode.FULL, tmp_path, config).passed

    def test_bad_extra_pattern_fails_before_reading(self, tmp_path: Path, monkeypatch):
        _write(tmp_path, "app.py", "")
        config = CredguardConfig(scan=ScanConfig(extra_patterns=[{"label": "X", "regex": "("}]))

        def should_not_run(*args, **kwargs):
            raise AssertionError("files were listed")

        monkeypatch.setattr("credguard.scanner.engine.list_candidate_files", should_not_run)

        with pytest.raises(CatalogError):
            scan(ScanMode.FULL, tmp_path, config)

    @pytest.mark.skipif(os.name == "nt", reason="symlinks")
    def test_broken_symlink_ignored(self, tmp_path: Path):
        (tmp_path / "dangling.py").symlink_to(tmp_path / "missing.py")

        result = scan(ScanMode.FULL, tmp_path)

        assert result.passed
        assert result.files_scanned == []
