"""Scan command - find credentials in the working tree or staged files."""

from __future__ import annotations

from typing import Annotated

import typer

from credguard.cli_commands.context import (
    ConfigOption,
    RootOption,
    load_project_config,
    resolve_root,
)
from credguard.output.rich import console, print_error
from credguard.scanner.engine import ScanMode, ScanRules
from credguard.scanner.engine import scan as run_scan
from credguard.scanner.output import format_json, format_rich
from credguard.scanner.patterns import CatalogError

CATALOG_FAULT_EXIT = 2


def scan(
    staged: Annotated[
        bool,
        typer.Option(
            "--staged",
            "-s",
            help="Only scan files staged for commit (for pre-commit hooks)",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Exit with code 1 when anything is found",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output results as JSON",
        ),
    ] = False,
    root: RootOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Scan for API keys, tokens, passwords and connection strings.

    \b
    Exit codes:
      0 - Nothing found, or findings without --strict
      1 - Findings with --strict
      2 - The pattern catalog is invalid

    \b
    Examples:
      credguard scan                     # Report only
      credguard scan --strict            # Fail on findings (pre-push)
      credguard scan --staged --strict   # Pre-commit mode
      credguard scan --json              # JSON output for automation
    """
    project_root = resolve_root(root)
    config = load_project_config(config_file, project_root)

    try:
        rules = ScanRules.from_config(config.scan)
    except CatalogError as e:
        print_error(f"Invalid pattern catalog: {e}")
        raise typer.Exit(code=CATALOG_FAULT_EXIT) from None

    mode = ScanMode.STAGED if staged else ScanMode.FULL
    if not json_output:
        target = "staged files" if staged else project_root.as_posix()
        console.print(f"[dim]Scanning {target} for exposed credentials...[/dim]")

    result = run_scan(mode, project_root, config, rules)

    if json_output:
        print(format_json(result))
    else:
        format_rich(result, console)

    if strict and not result.passed:
        raise typer.Exit(code=result.exit_code)
