"""Tests for credguard.core.validator."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from credguard.config import CredguardConfig, HooksConfig, ManifestsConfig
from credguard.core.validator import EnvironmentValidator, ignore_entry_for
from credguard.integrations.git_hooks import install_hooks


def _validate(root: Path, config: CredguardConfig | None = None):
    return EnvironmentValidator(root, config).validate()


@pytest.fixture
def ready_repo(repo: Path, write_manifests, valid_manifests, full_gitignore) -> Path:
    write_manifests(repo, valid_manifests)
    (repo / ".gitignore").write_text(full_gitignore)
    install_hooks(repo / ".git" / "hooks")
    return repo


class TestIgnoreEntry:
    @pytest.mark.parametrize("directory", [".secrets", ".secrets/", "/.secrets"])
    def test_trailing_slash(self, directory):
        assert ignore_entry_for(directory) == ".secrets/"


class TestDirectory:
    def test_missing_directory_stops_validation(self, repo: Path):
        result = _validate(repo)

        assert not result.passed
        assert result.errors == ["Missing .secrets/ directory - create it to store credentials safely"]
        assert result.warnings == []

    def test_empty_directory(self, repo: Path):
        (repo / ".secrets").mkdir()

        result = _validate(repo)

        assert len(result.errors) == 1
        assert "empty" in result.errors[0]

    def test_unlistable_directory_is_error(self, repo: Path, monkeypatch):
        (repo / ".secrets").mkdir()
        original = Path.iterdir

        def iterdir(self):
            if self.name == ".secrets":
                raise PermissionError(13, "Permission denied")
            return original(self)

        monkeypatch.setattr(Path, "iterdir", iterdir)

        result = _validate(repo)

        assert not result.passed
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Unable to read .secrets/ directory")


class TestManifests:
    def test_all_valid_passes_with_optional_warnings(self, ready_repo: Path):
        result = _validate(ready_repo)

        assert result.passed
        assert result.errors == []
        assert "Missing credential file: openai.env" in result.warnings
        assert "github.env: GITHUB_PAT" in result.validated

    def test_only_agentmail_present(
        self, repo: Path, write_manifests, valid_manifests, full_gitignore
    ):
        write_manifests(repo, {"agentmail.env": valid_manifests["agentmail.env"]})
        (repo / ".gitignore").write_text(full_gitignore)

        result = _validate(repo)

        assert not result.passed
        assert result.errors == [
            "Missing credential file: browser-use.env",
            "Missing credential file: gmail.env",
            "Missing credential file: github.env",
        ]
        assert "agentmail.env: AGENTMAIL_API_KEY, AGENTMAIL_FROM_EMAIL" in result.validated

    def test_missing_required_key_is_error(self, ready_repo: Path):
        (ready_repo / ".secrets" / "gmail.env").write_text("GMAIL_EMAIL=bot@gmail.com\n")

        result = _validate(ready_repo)

        assert result.errors == ["gmail.env missing variables: GMAIL_APP_PASSWORD"]
        assert "gmail.env: GMAIL_EMAIL" in result.validated

    def test_short_required_value_is_error(self, ready_repo: Path):
        (ready_repo / ".secrets" / "github.env").write_text("GITHUB_PAT=ab\n")

        assert not _validate(ready_repo).passed

    def test_optional_issues_never_fail(self, ready_repo: Path, write_manifests):
        write_manifests(
            ready_repo,
            {"openai.env": "OTHER=1\n", "strackr.env": "STRACKR_EMAIL=a\n"},
        )

        result = _validate(ready_repo)

        assert result.passed
        assert "openai.env missing variables: OPENAI_API_KEY" in result.warnings
        assert "strackr.env missing variables: STRACKR_EMAIL, STRACKR_PASSWORD" in result.warnings

    def test_weak_values_are_warnings(self, ready_repo: Path):
        (ready_repo / ".secrets" / "github.env").write_text("GITHUB_PAT=your_token_here\n")

        result = _validate(ready_repo)

        assert result.passed
        assert "github.env: GITHUB_PAT appears to contain placeholder value" in result.warnings

    def test_non_env_file_warning(self, ready_repo: Path):
        (ready_repo / ".secrets" / "notes.txt").write_text("hi\n")

        result = _validate(ready_repo)

        assert result.passed
        assert any("notes.txt" in w for w in result.warnings)

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions")
    def test_unreadable_required_manifest_is_error(self, ready_repo: Path):
        path = ready_repo / ".secrets" / "github.env"
        path.chmod(0)
        try:
            result = _validate(ready_repo)
        finally:
            path.chmod(0o600)

        assert any(e.startswith("Failed to read github.env") for e in result.errors)
        # Checking continued with the other manifests.
        assert "gmail.env: GMAIL_EMAIL, GMAIL_APP_PASSWORD" in result.validated


class TestGitHygiene:
    def test_no_gitignore_is_error(self, ready_repo: Path):
        (ready_repo / ".gitignore").unlink()

        result = _validate(ready_repo)

        assert not result.passed
        assert "credentials could be exposed" in result.errors[0]

    def test_directory_not_ignored_is_error(self, ready_repo: Path):
        (ready_repo / ".gitignore").write_text("node_modules/\n")

        result = _validate(ready_repo)

        assert result.errors == [".secrets/ directory is not in .gitignore - credentials could be exposed!"]

    def test_missing_hook_is_warning(self, ready_repo: Path):
        (ready_repo / ".git" / "hooks" / "pre-commit").unlink()

        result = _validate(ready_repo)

        assert result.passed
        assert any("No pre-commit security hook" in w for w in result.warnings)

    def test_foreign_hook_is_warning(self, ready_repo: Path):
        (ready_repo / ".git" / "hooks" / "pre-commit").write_text("#!/bin/sh\nexit 0\n")

        result = _validate(ready_repo)

        assert result.passed
        assert "Pre-commit hook exists but not security-enabled" in result.warnings


class TestConfiguredSchema:
    def test_custom_directory_and_schema(self, repo: Path):
        secrets = repo / "creds"
        secrets.mkdir()
        (secrets / "stripe.env").write_text("STRIPE_KEY=" + "s" * 24 + "\n")
        (repo / ".gitignore").write_text("creds/\n")
        config = CredguardConfig(
            manifests=ManifestsConfig(
                directory="creds", required={"stripe.env": ("STRIPE_KEY",)}, optional={}
            ),
            hooks=HooksConfig(directory="hooks"),
        )

        result = _validate(repo, config)

        assert result.passed
        assert result.validated == ["stripe.env: STRIPE_KEY"]
        assert any("No pre-commit security hook" in w for w in result.warnings)
