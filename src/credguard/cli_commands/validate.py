"""Validate command - check the credential manifests."""

from __future__ import annotations

import typer

from credguard.cli_commands.context import (
    ConfigOption,
    RootOption,
    load_project_config,
    resolve_root,
)
from credguard.core.validator import EnvironmentValidator
from credguard.output.rich import console, print_validation


def validate(
    root: RootOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Check that required manifests exist and define every key.

    Warnings (optional manifests, placeholder values, a missing hook) are
    reported but never fail the command.
    """
    project_root = resolve_root(root)
    config = load_project_config(config_file, project_root)

    console.print("[bold]Validating credential manifests...[/bold]")
    console.print()

    result = EnvironmentValidator(project_root, config).validate()
    print_validation(result)

    if not result.passed:
        raise typer.Exit(code=1)
