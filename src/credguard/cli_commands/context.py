"""Shared option types and project loading for the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from credguard.config import ConfigError, CredguardConfig, load_config
from credguard.output.rich import print_error
from credguard.utils.git import get_git_root

RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        "-r",
        help="Repository root (default: the git root of the current directory)",
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to credguard.toml (auto-detected if not specified)",
    ),
]


def resolve_root(root: Path | None) -> Path:
    """Use ``root`` if given, else the enclosing git root, else the cwd."""
    if root is not None:
        if not root.is_dir():
            print_error(f"Not a directory: {root}")
            raise typer.Exit(code=1)
        return root.resolve()

    cwd = Path.cwd()
    return get_git_root(cwd) or cwd


def load_project_config(config_file: Path | None, root: Path) -> CredguardConfig:
    """Load configuration, exiting with code 1 if it is missing or invalid."""
    try:
        return load_config(config_file, start_dir=root)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
