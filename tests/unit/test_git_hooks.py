"""Tests for credguard.integrations.git_hooks."""

from __future__ import annotations

import os
import stat
from datetime import datetime, timezone
from pathlib import Path

import pytest

from credguard.integrations.git_hooks import (
    COMMIT_MSG_HOOK,
    HOOK_FINGERPRINT,
    HOOKS,
    PRE_COMMIT_HOOK,
    PRE_PUSH_HOOK,
    HookStatus,
    hook_status,
    install_hooks,
    uninstall_hooks,
)


def _backups(hooks_dir: Path, name: str) -> list[Path]:
    return sorted(hooks_dir.glob(f"{name}.backup-*"))


class TestHookBodies:
    def test_scanner_hooks_run_scan(self):
        assert "credguard scan --staged --strict" in PRE_COMMIT_HOOK
        assert "credguard scan --strict" in PRE_PUSH_HOOK
        assert HOOK_FINGERPRINT in PRE_COMMIT_HOOK
        assert HOOK_FINGERPRINT in PRE_PUSH_HOOK

    def test_scanner_hooks_propagate_exit_code(self):
        for body in (PRE_COMMIT_HOOK, PRE_PUSH_HOOK):
            assert body.startswith("#!/bin/sh")
            assert "exit $status" in body

    def test_commit_msg_prompts(self):
        assert "/dev/tty" in COMMIT_MSG_HOOK
        assert "password|secret|key|credential|token" in COMMIT_MSG_HOOK


class TestInstall:
    def test_creates_directory_and_hooks(self, tmp_path: Path):
        hooks_dir = tmp_path / ".git" / "hooks"

        installed = install_hooks(hooks_dir)

        assert [h.name for h in installed] == ["pre-commit", "pre-push", "commit-msg"]
        assert all(h.backup_path is None for h in installed)
        for hook in HOOKS:
            assert (hooks_dir / hook.name).read_text() == hook.body

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_hooks_are_executable(self, tmp_path: Path):
        install_hooks(tmp_path)

        mode = stat.S_IMODE((tmp_path / "pre-commit").stat().st_mode)
        assert mode == 0o755

    def test_existing_hook_backed_up(self, tmp_path: Path):
        (tmp_path / "pre-commit").write_text("#!/bin/sh\necho mine\n")

        installed = install_hooks(tmp_path)

        backup = installed[0].backup_path
        assert backup is not None
        assert backup.read_text() == "#!/bin/sh\necho mine\n"
        assert backup.name.startswith("pre-commit.backup-")

    def test_install_twice(self, tmp_path: Path):
        install_hooks(tmp_path)
        install_hooks(tmp_path)

        for hook in HOOKS:
            assert (tmp_path / hook.name).read_text() == hook.body
            backups = _backups(tmp_path, hook.name)
            assert len(backups) == 1
            assert backups[0].read_text() == hook.body

    def test_backups_never_overwritten(self, tmp_path: Path, monkeypatch):
        from credguard.integrations import git_hooks

        class FrozenClock:
            @staticmethod
            def now(tz=None):
                return datetime(2026, 1, 1, tzinfo=timezone.utc)

        monkeypatch.setattr(git_hooks, "datetime", FrozenClock)

        install_hooks(tmp_path)
        install_hooks(tmp_path)
        install_hooks(tmp_path)

        assert len(_backups(tmp_path, "pre-commit")) == 2

    @pytest.mark.skipif(os.name == "nt", reason="POSIX symlinks")
    def test_symlinked_hook_target_untouched(self, tmp_path: Path):
        scripts = tmp_path / "scripts"
        scripts.mkdir()
        team_hook = scripts / "team-pre-commit"
        team_hook.write_text("#!/bin/sh\necho team hook\n")
        hooks_dir = tmp_path / ".git" / "hooks"
        hooks_dir.mkdir(parents=True)
        (hooks_dir / "pre-commit").symlink_to(team_hook)

        installed = install_hooks(hooks_dir)

        pre_commit = hooks_dir / "pre-commit"
        assert not pre_commit.is_symlink()
        assert pre_commit.read_text() == PRE_COMMIT_HOOK
        assert team_hook.read_text() == "#!/bin/sh\necho team hook\n"

        backup = installed[0].backup_path
        assert backup is not None
        assert backup.is_symlink()
        assert backup.resolve() == team_hook.resolve()

        uninstall_hooks(hooks_dir)

        assert team_hook.read_text() == "#!/bin/sh\necho team hook\n"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX symlinks")
    def test_dangling_symlink_replaced(self, tmp_path: Path):
        (tmp_path / "pre-push").symlink_to(tmp_path / "gone")

        installed = install_hooks(tmp_path)

        assert not (tmp_path / "gone").exists()
        assert (tmp_path / "pre-push").read_text() == PRE_PUSH_HOOK
        assert installed[1].backup_path.is_symlink()


class TestUninstall:
    def test_uninstall_after_install_keeps_backups(self, tmp_path: Path):
        (tmp_path / "pre-push").write_text("#!/bin/sh\necho original\n")
        install_hooks(tmp_path)

        removed = uninstall_hooks(tmp_path)

        assert removed == ["pre-commit", "pre-push", "commit-msg"]
        for hook in HOOKS:
            assert not (tmp_path / hook.name).exists()
        assert len(_backups(tmp_path, "pre-push")) == 1

    def test_idempotent(self, tmp_path: Path):
        assert uninstall_hooks(tmp_path) == []
        assert uninstall_hooks(tmp_path / "missing") == []


class TestStatus:
    def test_status(self, tmp_path: Path):
        (tmp_path / "pre-commit").write_text("#!/bin/sh\nexit 0\n")
        (tmp_path / "pre-push").write_text("#!/bin/sh\ncredguard scan --strict\n")

        assert hook_status(tmp_path, "pre-commit") is HookStatus.FOREIGN
        assert hook_status(tmp_path, "pre-push") is HookStatus.ENABLED
        assert hook_status(tmp_path, "commit-msg") is HookStatus.MISSING
