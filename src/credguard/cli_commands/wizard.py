"""Setup wizard command - one-step credential protection for a repository."""

from __future__ import annotations

import typer

from credguard.cli_commands.context import (
    ConfigOption,
    RootOption,
    load_project_config,
    resolve_root,
)
from credguard.cli_commands.scan import CATALOG_FAULT_EXIT
from credguard.core.bootstrap import SetupError, SetupOrchestrator
from credguard.output.rich import console, print_error, print_setup_summary
from credguard.scanner.patterns import CatalogError


def setup(
    root: RootOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Create the manifest directory, install hooks, validate and audit.

    Safe to re-run. Exits 1 only when a step cannot write to disk.
    """
    project_root = resolve_root(root)
    config = load_project_config(config_file, project_root)

    console.print("[bold]credguard setup[/bold]")
    console.print()

    try:
        summary = SetupOrchestrator(project_root, config).run()
    except SetupError as e:
        print_error(f"Setup failed: {e}")
        console.print("\nTry running individual commands:")
        console.print("  credguard install-hooks")
        console.print("  credguard validate")
        console.print("  credguard audit")
        raise typer.Exit(code=1) from None
    except CatalogError as e:
        print_error(f"Invalid pattern catalog: {e}")
        raise typer.Exit(code=CATALOG_FAULT_EXIT) from None

    print_setup_summary(summary)
