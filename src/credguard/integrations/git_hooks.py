"""Direct git hook installation.

Three hooks are managed: ``pre-commit`` scans staged files, ``pre-push`` scans
the whole tree, and ``commit-msg`` asks for confirmation when a commit message
mentions credentials without saying it fixes something. A pre-existing hook is
always copied to a timestamped backup before it is replaced.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

# Text every scanner-enforcing hook contains.
HOOK_FINGERPRINT = "credguard scan"

HOOK_MODE = 0o755

_RUN_SCAN = """\
if command -v credguard >/dev/null 2>&1; then
    credguard scan {flags}
else
    python3 -m credguard scan {flags}
fi
"""

PRE_COMMIT_HOOK = (
    """\
#!/bin/sh
# credguard pre-commit hook
# Blocks commits whose staged files contain credentials.

echo "Running pre-commit security scan..."

"""
    + _RUN_SCAN.format(flags="--staged --strict")
    + """status=$?

if [ $status -ne 0 ]; then
    echo ""
    echo "COMMIT REJECTED - security scan failed"
    echo "Fix the issues above before committing (emergency bypass: git commit --no-verify)"
    exit $status
fi

exit 0
"""
)

PRE_PUSH_HOOK = (
    """\
#!/bin/sh
# credguard pre-push hook
# Full repository scan before anything leaves the machine.

echo "Running pre-push security verification..."

"""
    + _RUN_SCAN.format(flags="--strict")
    + """status=$?

if [ $status -ne 0 ]; then
    echo ""
    echo "PUSH REJECTED - repository contains security issues"
    exit $status
fi

exit 0
"""
)

COMMIT_MSG_HOOK = """\
#!/usr/bin/env bash
# credguard commit-msg hook
# Asks for confirmation when a message mentions credentials without a fix keyword.

commit_msg_file="$1"
commit_msg=$(cat "$commit_msg_file")

if echo "$commit_msg" | grep -qi -E "(password|secret|key|credential|token)"; then
    if ! echo "$commit_msg" | grep -qi -E "(fix|remove|clean|redact|security)"; then
        echo ""
        echo "WARNING: commit message mentions credentials"
        echo "If you are fixing a security issue, say so, for example:"
        echo "  - 'SECURITY FIX: ...'"
        echo "  - 'Remove exposed credentials'"
        echo ""
        echo "Current message: $commit_msg"
        echo ""
        confirm=""
        if [ -r /dev/tty ]; then
            read -r -p "Continue anyway? (y/N): " confirm < /dev/tty
        fi
        if [[ ! "$confirm" =~ ^[Yy]$ ]]; then
            echo "Commit aborted"
            exit 1
        fi
    fi
fi

exit 0
"""


@dataclass(frozen=True)
class HookDefinition:
    """A hook name and the script written for it."""

    name: str
    body: str


HOOKS: tuple[HookDefinition, ...] = (
    HookDefinition("pre-commit", PRE_COMMIT_HOOK),
    HookDefinition("pre-push", PRE_PUSH_HOOK),
    HookDefinition("commit-msg", COMMIT_MSG_HOOK),
)

# Hooks that must run the scanner.
ENFORCING_HOOKS: tuple[str, ...] = ("pre-commit", "pre-push")


class HookStatus(str, Enum):
    """State of one hook on disk."""

    MISSING = "missing"
    FOREIGN = "foreign"  # present but does not run the scanner
    ENABLED = "enabled"


@dataclass(frozen=True)
class InstalledHook:
    """Outcome of installing one hook."""

    name: str
    path: Path
    backup_path: Path | None


def _backup_path(hook_path: Path) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    candidate = hook_path.with_name(f"{hook_path.name}.backup-{stamp}")
    counter = 1
    while candidate.exists() or candidate.is_symlink():
        candidate = hook_path.with_name(f"{hook_path.name}.backup-{stamp}-{counter}")
        counter += 1
    return candidate


def install_hook(hooks_dir: Path, hook: HookDefinition) -> InstalledHook:
    """Write one hook, backing up whatever was there.

    Raises:
        OSError: If the hook or its backup cannot be written.
    """
    hook_path = hooks_dir / hook.name
    backup: Path | None = None

    if hook_path.is_symlink():
        # The link is backed up as a link and replaced; its target is never written.
        backup = _backup_path(hook_path)
        shutil.copy2(hook_path, backup, follow_symlinks=False)
        hook_path.unlink()
        logger.info("Backed up existing %s link to %s", hook.name, backup)
    elif hook_path.exists():
        backup = _backup_path(hook_path)
        shutil.copy2(hook_path, backup)
        logger.info("Backed up existing %s to %s", hook.name, backup)

    hook_path.write_text(hook.body, encoding="utf-8")
    hook_path.chmod(HOOK_MODE)
    return InstalledHook(name=hook.name, path=hook_path, backup_path=backup)


def install_hooks(
    hooks_dir: Path, hooks: tuple[HookDefinition, ...] = HOOKS
) -> list[InstalledHook]:
    """Install all hooks, creating the hooks directory if needed.

    Raises:
        OSError: If the directory or a hook cannot be written.
    """
    hooks_dir.mkdir(parents=True, exist_ok=True)
    return [install_hook(hooks_dir, hook) for hook in hooks]


def uninstall_hooks(
    hooks_dir: Path, hooks: tuple[HookDefinition, ...] = HOOKS
) -> list[str]:
    """Remove the managed hooks. Missing hooks and backups are left alone.

    Returns:
        Names of the hooks that were removed.

    Raises:
        OSError: If an existing hook cannot be removed.
    """
    removed = []
    for hook in hooks:
        hook_path = hooks_dir / hook.name
        if hook_path.is_file():
            hook_path.unlink()
            removed.append(hook.name)
    return removed


def hook_status(hooks_dir: Path, name: str) -> HookStatus:
    """Classify one hook as missing, foreign or scanner-enabled.

    Raises:
        OSError: If the hook exists but cannot be read.
    """
    hook_path = hooks_dir / name
    if not hook_path.is_file():
        return HookStatus.MISSING
    content = hook_path.read_text(encoding="utf-8", errors="replace")
    return HookStatus.ENABLED if HOOK_FINGERPRINT in content else HookStatus.FOREIGN
