"""Audit command - score the repository's credential hygiene."""

from __future__ import annotations

from typing import Annotated

import typer

from credguard.audit.auditor import SecurityAuditor
from credguard.audit.report import render_report
from credguard.cli_commands.context import (
    ConfigOption,
    RootOption,
    load_project_config,
    resolve_root,
)
from credguard.cli_commands.scan import CATALOG_FAULT_EXIT
from credguard.output.rich import console, print_error
from credguard.scanner.patterns import CatalogError


def audit(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Include low severity findings in the report",
        ),
    ] = False,
    fix: Annotated[
        bool,
        typer.Option(
            "--fix",
            help="Fix .gitignore entries, manifest permissions and missing hooks first",
        ),
    ] = False,
    root: RootOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Run every security check and print a score from 0 to 100.

    \b
    Exit codes:
      0 - Score of 80 or more
      1 - Score below 80
      2 - The pattern catalog is invalid
    """
    project_root = resolve_root(root)
    config = load_project_config(config_file, project_root)

    console.print("[bold]Running security audit...[/bold]")
    console.print()

    try:
        report = SecurityAuditor(project_root, config).run(fix=fix)
    except CatalogError as e:
        print_error(f"Invalid pattern catalog: {e}")
        raise typer.Exit(code=CATALOG_FAULT_EXIT) from None

    render_report(report, console, verbose=verbose)

    if not report.passed:
        raise typer.Exit(code=1)
