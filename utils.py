# utils.py
"""
Report generation and console output.

- Sorting and grouping by severity (stable, so store order breaks ties).
- JSON, CSV and HTML renderings of a finding list.
- Rich console listing grouped by severity, a Rich table, and a summary.
"""

import csv
import html
import io
import json
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from models import Finding, Severity

FIELDNAMES = ["resource_id", "resource_type", "severity", "title", "description", "region", "account", "timestamp"]

SEVERITY_STYLES = {
    Severity.CRITICAL: ("bold red", "🔴 CRITICAL"),
    Severity.HIGH: ("bright_red", "🟠 HIGH"),
    Severity.MEDIUM: ("yellow", "🟡 MEDIUM"),
    Severity.LOW: ("blue", "🔵 LOW"),
}

# --- Ordering --------------------------------------------------------------

def sort_by_severity(findings: List[Finding]) -> List[Finding]:
    """
    Return a new list, CRITICAL first. sorted() is stable, so findings of
    equal severity keep their relative order.
    """
    return sorted(findings, key=lambda f: f.severity.rank)

def group_by_severity(findings: List[Finding]) -> Dict[Severity, List[Finding]]:
    groups: Dict[Severity, List[Finding]] = {sev: [] for sev in Severity}
    for f in findings:
        groups[f.severity].append(f)
    return groups

# --- Serialization ---------------------------------------------------------

def findings_to_json(findings: List[Finding]) -> str:
    return json.dumps([f.to_dict() for f in findings], indent=2)

def findings_to_csv(findings: List[Finding]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=FIELDNAMES, lineterminator="\n")
    writer.writeheader()
    for f in findings:
        writer.writerow(f.to_dict())
    return buf.getvalue()

def findings_to_html(findings: List[Finding], region: str = "") -> str:
    """
    Standalone HTML report: header, totals per severity, one row per finding.
    """
    now = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
    groups = group_by_severity(findings)
    html_rows: List[str] = []
    html_rows.append("<!doctype html>")
    html_rows.append("<html><head><meta charset='utf-8'><title>AWS Security Scan Report</title>")
    html_rows.append("<style>body{font-family:Arial,Helvetica,sans-serif;margin:20px}table{border-collapse:collapse;width:100%}th,td{border:1px solid #ddd;padding:8px}th{background:#f2f2f2;text-align:left}tr:nth-child(even){background:#fafafa}.CRITICAL{color:#b00020;font-weight:bold}.HIGH{color:#d35400}.MEDIUM{color:#b7950b}.LOW{color:#1f618d}</style>")
    html_rows.append("</head><body>")
    html_rows.append(f"<h2>AWS Security Scan Report - {now} - region: {html.escape(region)}</h2>")
    html_rows.append(f"<p>Total findings: {len(findings)}</p>")
    html_rows.append("<ul>")
    for sev in Severity:
        html_rows.append(f"<li class='{sev.value}'>{sev.value}: {len(groups[sev])}</li>")
    html_rows.append("</ul>")
    html_rows.append("<table><thead><tr><th>Severity</th><th>Resource Type</th><th>Resource ID</th><th>Title</th><th>Description</th></tr></thead><tbody>")
    for f in findings:
        html_rows.append(
            f"<tr><td class='{f.severity.value}'>{f.severity.value}</td>"
            f"<td>{html.escape(f.resource_type.value)}</td>"
            f"<td>{html.escape(f.resource_id)}</td>"
            f"<td>{html.escape(f.title)}</td>"
            f"<td>{html.escape(f.description)}</td></tr>"
        )
    html_rows.append("</tbody></table></body></html>")
    return "\n".join(html_rows)

def save_report(content: str, path: str) -> str:
    """
    Write a rendered report to path, creating parent directories.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(content)
    return path

# --- Console printing ------------------------------------------------------

def severity_text(severity: Severity, with_icon: bool = False) -> Text:
    style, label = SEVERITY_STYLES[severity]
    return Text(label if with_icon else severity.value, style=style)

def print_summary(findings: List[Finding], console: Optional[Console] = None) -> None:
    console = console or Console()
    groups = group_by_severity(findings)
    console.print("\nSummary:")
    console.print(f"  Total Findings: {len(findings)}")
    for sev in Severity:
        console.print(Text.assemble("  ", severity_text(sev), f": {len(groups[sev])}"))
    console.print()

def print_console(findings: List[Finding], console: Optional[Console] = None) -> None:
    """
    Print findings grouped by severity, most severe first, then the summary.
    """
    console = console or Console()
    if not findings:
        console.print("\n✅ No security issues found!", style="green")
        return

    console.print(Rule("SECURITY FINDINGS", style="red"))
    for sev, group in group_by_severity(findings).items():
        if not group:
            continue
        console.print(Text.assemble("\n", severity_text(sev, with_icon=True), f" ({len(group)} findings)"))
        console.print(Rule(style="white"))
        for i, f in enumerate(group, start=1):
            console.print(Text.assemble(f"\n{i}. ", (f.title, "yellow")))
            console.print(Text(f"   Resource: {f.resource_id} ({f.resource_type.value})"))
            console.print(Text(f"   Region: {f.region}"))
            console.print(Text(f"   {f.description}"))
    console.print(Rule(style="red"))
    print_summary(findings, console)

def print_table(findings: List[Finding], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not findings:
        console.print("\n✅ No security issues found!", style="green")
        return

    table = Table(show_header=True, header_style="bold cyan", show_lines=True)
    table.add_column("Severity")
    table.add_column("Resource Type", style="magenta")
    table.add_column("Resource ID", style="cyan", overflow="fold")
    table.add_column("Title", overflow="fold")
    for f in findings:
        table.add_row(severity_text(f.severity), f.resource_type.value, f.resource_id, f.title)
    console.print()
    console.print(table)
    print_summary(findings, console)
