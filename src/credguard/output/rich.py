"""Rich console output helpers shared by the CLI commands."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from credguard.core.bootstrap import SetupSummary
from credguard.core.validator import ValidationResult

console = Console()


def print_success(message: str) -> None:
    console.print(f"[bold green]✓[/bold green] {escape(message)}")


def print_warning(message: str) -> None:
    console.print(f"[bold yellow]⚠[/bold yellow] {escape(message)}")


def print_error(message: str) -> None:
    console.print(f"[bold red]✗[/bold red] {escape(message)}")


def print_validation(result: ValidationResult, target: Console | None = None) -> None:
    """Print validated manifests, warnings and errors, then the verdict."""
    out = target or console

    if result.validated:
        out.print("[bold green]VALIDATED:[/bold green]")
        for item in result.validated:
            out.print(f"  [green]✓[/green] {escape(item)}", highlight=False)
        out.print()

    if result.warnings:
        out.print("[bold yellow]WARNINGS:[/bold yellow]")
        for warning in result.warnings:
            out.print(f"  [yellow]⚠[/yellow] {escape(warning)}", highlight=False)
        out.print()

    if result.errors:
        out.print("[bold red]ERRORS:[/bold red]")
        for error in result.errors:
            out.print(f"  [red]✗[/red] {escape(error)}", highlight=False)
        out.print()

    if result.passed:
        out.print(
            Panel(
                "[green]Environment validation passed[/green]"
                + (f"\n{len(result.warnings)} warning(s) to review" if result.warnings else ""),
                title="validate",
                expand=False,
            )
        )
    else:
        out.print(
            Panel(
                f"[red]Environment validation failed with {len(result.errors)} error(s)[/red]",
                title="validate",
                expand=False,
            )
        )


def print_setup_summary(summary: SetupSummary, target: Console | None = None) -> None:
    """Print completed steps, warnings and next-step commands."""
    out = target or console

    out.print("[bold]COMPLETED STEPS:[/bold]")
    for step in summary.steps:
        out.print(f"  [green]•[/green] {escape(step)}", highlight=False)
    out.print()

    if summary.warnings:
        out.print("[bold yellow]WARNINGS:[/bold yellow]")
        for warning in summary.warnings:
            out.print(f"  [yellow]•[/yellow] {escape(warning)}", highlight=False)
        out.print()

    if summary.next_steps:
        out.print("[bold]NEXT STEPS:[/bold]")
        for step in summary.next_steps:
            out.print(f"  • {escape(step)}", highlight=False)
        out.print()

    out.print("[bold]SECURITY COMMANDS:[/bold]")
    out.print("  credguard scan             # Scan for exposed credentials")
    out.print("  credguard validate         # Check the credential manifests")
    out.print("  credguard audit --verbose  # Full security audit")
    out.print()

    if summary.complete:
        out.print("[bold green]Your repository is fully secured.[/bold green]")
    else:
        out.print("[yellow]Almost there: complete the next steps to finish setup.[/yellow]")
