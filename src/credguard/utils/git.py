"""Git utilities for credguard.

Every call is a blocking ``git`` subprocess with a fixed timeout. Callers
that can continue without git catch :class:`GitError`.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30


class GitError(Exception):
    """Error executing git command."""

    pass


def run_git(args: list[str], cwd: Path) -> str:
    """
    Run a git command and return its stdout.

    Parameters:
        args: Arguments after ``git``.
        cwd: Working directory.

    Returns:
        The command's standard output.

    Raises:
        GitError: If git is missing, times out, or exits non-zero.
    """
    cmd = ["git", *args]
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        result = subprocess.run(  # nosec B603, B607
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {GIT_TIMEOUT}s") from e

    if result.returncode != 0:
        stderr = result.stderr.strip() or f"exit code {result.returncode}"
        raise GitError(f"git {args[0]} failed: {stderr}")
    return result.stdout


def get_git_root(path: Path) -> Path | None:
    """
    Get the root directory of the git repository containing the given path.

    Parameters:
        path: Path inside the git repository.

    Returns:
        Path to the git root, or None if not in a git repository.
    """
    try:
        output = run_git(["rev-parse", "--show-toplevel"], path if path.is_dir() else path.parent)
    except GitError:
        return None
    return Path(output.strip())


def staged_files(root: Path) -> list[Path]:
    """
    List files staged for commit (added, copied, modified or renamed).

    Parameters:
        root: Repository root or a directory inside it. Only files under
            ``root`` are listed, relative to it.

    Returns:
        Staged paths in the order git reports them.

    Raises:
        GitError: If git fails.
    """
    output = run_git(
        ["diff", "--cached", "--name-only", "--diff-filter=ACMR", "--relative"], root
    )
    return [Path(line) for line in output.splitlines() if line.strip()]


def recent_commit_messages(root: Path, count: int) -> list[str]:
    """
    Return the subject lines of the most recent commits, newest first.

    Raises:
        GitError: If git fails (e.g. not a repository, or no commits yet).
    """
    output = run_git(["log", f"-n{count}", "--format=%h %s"], root)
    return [line for line in output.splitlines() if line.strip()]


def remote_urls(root: Path) -> list[str]:
    """
    Return the distinct URLs of all configured remotes.

    Raises:
        GitError: If git fails.
    """
    urls: list[str] = []
    for line in run_git(["remote", "-v"], root).splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[1] not in urls:
            urls.append(parts[1])
    return urls
