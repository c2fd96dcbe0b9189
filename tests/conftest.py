"""Pytest configuration and shared fixtures.

Secret-shaped strings are assembled at runtime so these sources never match
the pattern catalog themselves.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from credguard.integrations.git_hooks import install_hooks

# Valid values for every required manifest: long enough, no placeholder
# markers, nothing from the weak-value list.
VALID_MANIFESTS: dict[str, str] = {
    "agentmail.env": (
        "# Agentmail\n"
        "AGENTMAIL_API_KEY=" + "a1b2c3d4" * 8 + "\n"
        "AGENTMAIL_FROM_EMAIL=bot@agentmail.to\n"
    ),
    "browser-use.env": "BROWSER_USE_API_KEY=" + "bu_" + "Q7" * 16 + "\n",
    "gmail.env": "GMAIL_EMAIL=bot@gmail.com\nGMAIL_APP_PASSWORD=" + "mqzt" * 4 + "\n",
    "github.env": "GITHUB_PAT=" + "ghp_" + "R4" * 18 + "\n",
}

FULL_GITIGNORE = ".secrets/\n*.env\n*.key\n__pycache__/\n.venv/\n*.log\n.DS_Store\n"


@pytest.fixture
def openai_key() -> str:
    """A string shaped like an OpenAI key."""
    return "sk-" + "Ab1" * 16


@pytest.fixture
def github_token() -> str:
    return "ghp_" + "x9Y" * 12


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """An empty repository root with a ``.git/hooks`` directory."""
    root = tmp_path / "project"
    (root / ".git" / "hooks").mkdir(parents=True)
    return root


def _write_manifests(root: Path, manifests: dict[str, str], mode: int = 0o600) -> Path:
    secrets = root / ".secrets"
    secrets.mkdir(exist_ok=True)
    for name, content in manifests.items():
        path = secrets / name
        path.write_text(content)
        if os.name != "nt":
            path.chmod(mode)
    return secrets


@pytest.fixture
def secured_repo(repo: Path) -> Path:
    """A repository that satisfies every audit check except optional manifests."""
    _write_manifests(repo, VALID_MANIFESTS)
    (repo / ".gitignore").write_text(FULL_GITIGNORE)
    (repo / "SECURITY.md").write_text("# Security policy\n\nReport issues privately.\n")
    (repo / "README.md").write_text("# Project\n\nSee SECURITY.md for security notes.\n")
    (repo / "app.py").write_text("import os\n\nAPI_KEY = os.environ['OPENAI_API_KEY']\n")
    install_hooks(repo / ".git" / "hooks")
    return repo


@pytest.fixture
def no_git(monkeypatch):
    """Make the auditor's git queries succeed with clean, empty results."""
    monkeypatch.setattr("credguard.audit.auditor.recent_commit_messages", lambda root, count: [])
    monkeypatch.setattr("credguard.audit.auditor.remote_urls", lambda root: [])


@pytest.fixture
def valid_manifests() -> dict[str, str]:
    return dict(VALID_MANIFESTS)


@pytest.fixture
def full_gitignore() -> str:
    return FULL_GITIGNORE


@pytest.fixture
def write_manifests():
    """Write manifest files under ``root/.secrets`` (mode 600) and return the directory."""
    return _write_manifests
