"""Output formatters for scan results."""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape

from credguard.scanner.base import SEVERITY_ORDER, FindingSeverity, ScanResult
from credguard.scanner.patterns import redact_secret

SEVERITY_STYLES: dict[FindingSeverity, str] = {
    FindingSeverity.CRITICAL: "bold red",
    FindingSeverity.HIGH: "red",
    FindingSeverity.MEDIUM: "yellow",
    FindingSeverity.LOW: "dim",
}

REMEDIATION_STEPS: tuple[str, ...] = (
    "Move credentials into the credential manifest directory",
    "Read them from environment variables at runtime",
    "Replace real values with fake examples in documentation",
    "Add a whitelist entry in credguard.toml if the match is legitimately safe",
)


def format_rich(result: ScanResult, console: Console) -> None:
    """Print a severity-grouped report."""
    if result.errors:
        for path, error in result.errors.items():
            console.print(f"[yellow]Skipped[/yellow] {escape(path.as_posix())}: {escape(error)}")
        console.print()

    if result.passed:
        console.print("[bold green]SECURITY SCAN PASSED[/bold green]")
        console.print(
            f"No credentials or sensitive data found in {len(result.files_scanned)} file(s)"
        )
        return

    console.print("[bold red]SECURITY SCAN FAILED[/bold red]")
    console.print(f"Found {len(result.findings)} potential security issue(s):")
    console.print()

    for severity in SEVERITY_ORDER:
        findings = result.by_severity(severity)
        if not findings:
            continue
        style = SEVERITY_STYLES[severity]
        console.print(f"[{style}]{severity.value} ISSUES:[/{style}]")
        for finding in findings:
            console.print(f"  {escape(finding.location)} - {escape(finding.label)}", highlight=False)
            console.print(
                f"  [dim]└─ {escape(redact_secret(finding.matched_text))}[/dim]", highlight=False
            )
        console.print()

    console.print("[bold]To fix:[/bold]")
    for index, step in enumerate(REMEDIATION_STEPS, start=1):
        console.print(f"  {index}. {step}")


def format_json(result: ScanResult) -> str:
    """Serialize a scan result; matched text is redacted."""
    payload = {
        "passed": result.passed,
        "files_scanned": len(result.files_scanned),
        "findings": [
            {
                "file": f.file_path.as_posix(),
                "line": f.line_number,
                "label": f.label,
                "severity": f.severity.value,
                "match": redact_secret(f.matched_text),
            }
            for f in result.findings
        ],
        "errors": {path.as_posix(): error for path, error in result.errors.items()},
    }
    return json.dumps(payload, indent=2)
