"""Utility modules for credguard."""

from credguard.utils.git import (
    GitError,
    get_git_root,
    recent_commit_messages,
    remote_urls,
    staged_files,
)

__all__ = [
    "GitError",
    "get_git_root",
    "recent_commit_messages",
    "remote_urls",
    "staged_files",
]
