# main.py
"""
CLI entrypoint for the scanner.

- Scans S3, security groups, IAM and EBS in one region, sequentially or
  concurrently (--concurrent).
- Renders findings as a console listing, a table, JSON, CSV or HTML.
- Exits 1 when the scan fails or any CRITICAL finding exists, so the tool can
  gate CI/CD pipelines.
"""

import argparse
import logging
import os
from typing import List, Optional

from rich.console import Console

from config import DEFAULT_AWS_PROFILE, DEFAULT_AWS_REGION, DEFAULT_OUTPUT, OUTPUT_CONSOLE, OUTPUT_CSV, \
    OUTPUT_FORMATS, OUTPUT_HTML, OUTPUT_JSON, OUTPUT_TABLE, REGION_ENV_VAR
from scanner import Scanner, ScannerError
from utils import findings_to_csv, findings_to_html, findings_to_json, print_console, print_table, save_report, \
    sort_by_severity

logger = logging.getLogger("cloud_scanner")

BANNER = """
    ╔═══════════════════════════════════════════════════════╗
    ║                                                       ║
    ║          AWS SECURITY SCANNER                         ║
    ║          Automated Security Assessment                ║
    ║                                                       ║
    ╚═══════════════════════════════════════════════════════╝
"""


def resolve_region(region: Optional[str]) -> str:
    """
    Resolve region: CLI -> env -> config default.
    """
    return region or os.environ.get(REGION_ENV_VAR) or DEFAULT_AWS_REGION


def render(findings, output: str, region: str) -> str:
    if output == OUTPUT_JSON:
        return findings_to_json(findings)
    if output == OUTPUT_CSV:
        return findings_to_csv(findings)
    if output == OUTPUT_HTML:
        return findings_to_html(findings, region)
    raise ValueError(f"Unknown output format: {output}")


def run_scan(region: str, profile: Optional[str] = None, output: str = DEFAULT_OUTPUT,
             out_file: str = "", concurrent: bool = False, verify: bool = True,
             console: Optional[Console] = None) -> int:
    """
    Run one scan and report it. Returns the process exit code.
    """
    console = console or Console()
    logger.info("Running in live AWS mode (region=%s)", region)

    try:
        scanner = Scanner.create(region, profile=profile, verify=verify)
        if concurrent:
            scanner.run_concurrent()
        else:
            scanner.run_sequential()
    except ScannerError as e:
        console.print(f"❌ Scan failed: {e}", style="red", markup=False)
        return 1

    findings = sort_by_severity(scanner.findings())

    if output == OUTPUT_CONSOLE:
        print_console(findings, console)
    elif output == OUTPUT_TABLE:
        print_table(findings, console)
    else:
        try:
            content = render(findings, output, region)
            if out_file:
                save_report(content, out_file)
                console.print(f"✅ Report saved to: {out_file}", style="green", markup=False)
            else:
                print(content)
        except (OSError, ValueError, TypeError) as e:
            console.print(f"❌ Error writing {output} report: {e}", style="red", markup=False)
            return 1

    # Non-zero exit for CI/CD pipelines
    if scanner.critical_findings():
        return 1
    return 0


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        description="AWS security misconfiguration scanner (S3, security groups, IAM, EBS)."
    )
    p.add_argument(
        "--region",
        help=f"AWS region to scan (default: ${REGION_ENV_VAR} or {DEFAULT_AWS_REGION})",
    )
    p.add_argument(
        "--profile",
        default=DEFAULT_AWS_PROFILE,
        help="AWS profile name (optional; credentials are otherwise taken from the environment)",
    )
    p.add_argument(
        "--output",
        choices=OUTPUT_FORMATS,
        default=DEFAULT_OUTPUT,
        help="Output format (default: console)",
    )
    p.add_argument(
        "--file",
        default="",
        help="Report file for json/csv/html output (default: write to stdout)",
    )
    p.add_argument(
        "--concurrent",
        action="store_true",
        help="Run checks concurrently",
    )
    p.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip the sts:GetCallerIdentity credential check",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    # Keep stdout clean when a machine-readable report goes there
    console = Console(stderr=args.output not in (OUTPUT_CONSOLE, OUTPUT_TABLE))
    console.print(BANNER, style="cyan", markup=False)
    return run_scan(
        resolve_region(args.region),
        profile=args.profile,
        output=args.output,
        out_file=args.file,
        concurrent=args.concurrent,
        verify=not args.no_verify,
        console=console,
    )


if __name__ == "__main__":
    raise SystemExit(main())
