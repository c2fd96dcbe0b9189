"""Install-hooks command - wire the scanner into git."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml

from credguard.cli_commands.context import (
    ConfigOption,
    RootOption,
    load_project_config,
    resolve_root,
)
from credguard.integrations.git_hooks import install_hooks as install_direct_hooks
from credguard.integrations.git_hooks import uninstall_hooks
from credguard.integrations.precommit import (
    PRECOMMIT_CONFIG,
    find_precommit_config,
    install_precommit_hooks,
    uninstall_precommit_hooks,
    verify_precommit_hooks,
)
from credguard.output.rich import console, print_error, print_success, print_warning


def _precommit(project_root: Path, uninstall: bool) -> None:
    config_path = find_precommit_config(project_root) or project_root / PRECOMMIT_CONFIG

    try:
        if uninstall:
            changed = uninstall_precommit_hooks(config_path)
        else:
            changed = install_precommit_hooks(config_path)
            installed = verify_precommit_hooks(config_path)
    except (OSError, yaml.YAMLError) as e:
        print_error(f"Failed to update {config_path}: {e}")
        raise typer.Exit(code=1) from None

    if uninstall:
        if changed:
            print_success(f"Removed credguard hooks from {config_path}")
        else:
            console.print(f"No credguard hooks found in {config_path}")
        return

    if changed:
        print_success(f"Added credguard hooks to {config_path}")
    else:
        console.print(f"credguard hooks already present in {config_path}")

    for hook_id, present in installed.items():
        if present:
            console.print(f"  [green]✓[/green] {hook_id}")
        else:
            print_warning(f"{hook_id} missing from {config_path}")

    if changed:
        console.print("[dim]Run: pre-commit install --hook-type pre-commit --hook-type pre-push[/dim]")


def install_hooks(
    uninstall: Annotated[
        bool,
        typer.Option(
            "--uninstall",
            help="Remove the credguard hooks (backups are kept)",
        ),
    ] = False,
    pre_commit_config: Annotated[
        bool,
        typer.Option(
            "--pre-commit-config",
            help=f"Register the hooks in {PRECOMMIT_CONFIG} instead of .git/hooks",
        ),
    ] = False,
    root: RootOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Install the pre-commit, pre-push and commit-msg security hooks.

    An existing hook is copied to a timestamped backup before it is replaced.
    """
    project_root = resolve_root(root)
    config = load_project_config(config_file, project_root)

    if pre_commit_config:
        _precommit(project_root, uninstall)
        return

    hooks_dir = config.hooks_dir(project_root)

    if uninstall:
        try:
            removed = uninstall_hooks(hooks_dir)
        except OSError as e:
            print_error(f"Failed to remove hooks: {e}")
            raise typer.Exit(code=1) from None
        if removed:
            print_success(f"Removed hooks: {', '.join(removed)}")
        else:
            console.print("No credguard hooks installed")
        return

    try:
        installed = install_direct_hooks(hooks_dir)
    except OSError as e:
        print_error(f"Failed to install hooks in {hooks_dir}: {e}")
        raise typer.Exit(code=1) from None

    for hook in installed:
        if hook.backup_path is not None:
            print_warning(f"Backed up existing {hook.name} hook to {hook.backup_path.name}")
        print_success(f"Installed {hook.name} hook")

    console.print()
    console.print("[bold]Protection enabled:[/bold]")
    console.print("  pre-commit  scans staged files for credentials")
    console.print("  pre-push    scans the whole repository before pushing")
    console.print("  commit-msg  asks for confirmation when a message mentions credentials")
    console.print()
    console.print("[dim]Emergency bypass (use sparingly): git commit --no-verify[/dim]")
