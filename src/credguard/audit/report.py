"""Rich rendering of an audit report."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from credguard.audit.auditor import AuditReport
from credguard.audit.scoring import PASS_THRESHOLD
from credguard.scanner.base import SEVERITY_ORDER, FindingSeverity
from credguard.scanner.output import SEVERITY_STYLES


def _score_style(score: int) -> str:
    if score >= 90:
        return "bold green"
    if score >= PASS_THRESHOLD:
        return "green"
    if score >= 60:
        return "yellow"
    return "bold red"


def render_report(report: AuditReport, console: Console, verbose: bool = False) -> None:
    """Print findings grouped by severity, then the score.

    Low findings are only listed when ``verbose`` is set; they always count
    toward the score.
    """
    if report.fixes_applied:
        console.print("[bold]Fixes applied:[/bold]")
        for fix in report.fixes_applied:
            console.print(f"  [green]✓[/green] {escape(fix)}")
        console.print()

    severities = SEVERITY_ORDER if verbose else SEVERITY_ORDER[:-1]
    shown = 0
    for severity in severities:
        findings = report.by_severity(severity)
        if not findings:
            continue
        style = SEVERITY_STYLES[severity]
        console.print(f"[{style}]{severity.value} ({len(findings)}):[/{style}]")
        for finding in findings:
            tag = escape(f"[{finding.category}]")
            console.print(f"  {tag} {escape(finding.message)}", highlight=False)
            if finding.remediation:
                console.print(f"    [dim]→ {escape(finding.remediation)}[/dim]", highlight=False)
        console.print()
        shown += len(findings)

    hidden = len(report.by_severity(FindingSeverity.LOW)) if not verbose else 0
    if not shown and not hidden:
        console.print("[green]No security issues found[/green]")
        console.print()
    elif hidden:
        console.print(f"[dim]{hidden} low severity finding(s) hidden, use --verbose to show[/dim]")
        console.print()

    style = _score_style(report.score)
    status = "[green]PASSED[/green]" if report.passed else "[red]FAILED[/red]"
    console.print(
        Panel(
            f"Score: [{style}]{report.score}/100[/{style}]   Grade: [{style}]{report.grade}[/{style}]\n"
            f"Status: {status} (pass threshold {PASS_THRESHOLD})",
            title="Security Audit",
            expand=False,
        )
    )
