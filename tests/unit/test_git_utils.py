"""Tests for credguard.utils.git."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from credguard.utils.git import (
    GIT_TIMEOUT,
    GitError,
    get_git_root,
    recent_commit_messages,
    remote_urls,
    run_git,
    staged_files,
)


def _completed(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return subprocess.CompletedProcess(["git"], returncode, stdout=stdout, stderr=stderr)


class TestRunGit:
    def test_returns_stdout(self, tmp_path: Path):
        with patch("credguard.utils.git.subprocess.run", return_value=_completed("ok\n")) as run:
            assert run_git(["status"], tmp_path) == "ok\n"

        args, kwargs = run.call_args
        assert args[0] == ["git", "status"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["timeout"] == GIT_TIMEOUT

    def test_nonzero_exit(self, tmp_path: Path):
        with patch(
            "credguard.utils.git.subprocess.run",
            return_value=_completed(returncode=128, stderr="fatal: not a git repository"),
        ):
            with pytest.raises(GitError, match="not a git repository"):
                run_git(["log"], tmp_path)

    def test_git_missing(self, tmp_path: Path):
        with patch("credguard.utils.git.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(GitError, match="not found"):
                run_git(["status"], tmp_path)

    def test_timeout(self, tmp_path: Path):
        with patch(
            "credguard.utils.git.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["git"], GIT_TIMEOUT),
        ):
            with pytest.raises(GitError, match="timed out"):
                run_git(["log"], tmp_path)


class TestQueries:
    def test_staged_files(self, tmp_path: Path):
        with patch("credguard.utils.git.run_git", return_value="a.py\nsrc/b.js\n\n") as run:
            assert staged_files(tmp_path) == [Path("a.py"), Path("src/b.js")]

        assert run.call_args.args[0] == [
            "diff",
            "--cached",
            "--name-only",
            "--diff-filter=ACMR",
            "--relative",
        ]

    def test_recent_commit_messages(self, tmp_path: Path):
        with patch("credguard.utils.git.run_git", return_value="abc123 first\ndef456 second\n") as run:
            assert recent_commit_messages(tmp_path, 5) == ["abc123 first", "def456 second"]

        assert run.call_args.args[0] == ["log", "-n5", "--format=%h %s"]

    def test_remote_urls_deduplicated(self, tmp_path: Path):
        output = (
            "origin\thttps://github.com/org/repo.git (fetch)\n"
            "origin\thttps://github.com/org/repo.git (push)\n"
            "backup\tgit@gitlab.com:org/repo.git (fetch)\n"
        )
        with patch("credguard.utils.git.run_git", return_value=output):
            assert remote_urls(tmp_path) == [
                "https://github.com/org/repo.git",
                "git@gitlab.com:org/repo.git",
            ]

    def test_repo_detection(self, tmp_path: Path):
        with patch("credguard.utils.git.run_git", return_value=f"{tmp_path}\n"):
            assert get_git_root(tmp_path) == tmp_path
        with patch("credguard.utils.git.run_git", side_effect=GitError("no")):
            assert get_git_root(tmp_path) is None
