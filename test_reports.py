# test_reports.py
"""
Report rendering tests.

- Severity sorting is stable and idempotent.
- JSON/CSV carry the documented field names.
- The HTML report is parsed with BeautifulSoup and checked row by row.
"""

import csv
import io
import json

from bs4 import BeautifulSoup
from rich.console import Console

from models import Finding, ResourceType, Severity
from utils import findings_to_csv, findings_to_html, findings_to_json, group_by_severity, print_console, \
    print_table, save_report, sort_by_severity

FIELDS = ["resource_id", "resource_type", "severity", "title", "description", "region", "account", "timestamp"]


def make(resource_id, severity):
    f = Finding(resource_id, ResourceType.S3_BUCKET, severity, f"title {resource_id}", f"desc {resource_id}")
    f.region = "us-east-1"
    return f


def sample():
    return [
        make("low-1", Severity.LOW),
        make("crit-1", Severity.CRITICAL),
        make("med-1", Severity.MEDIUM),
        make("crit-2", Severity.CRITICAL),
        make("low-2", Severity.LOW),
        make("high-1", Severity.HIGH),
    ]


def recording_console():
    return Console(file=io.StringIO(), width=140, color_system=None)


def test_sort_is_stable_and_idempotent():
    once = sort_by_severity(sample())
    assert [f.resource_id for f in once] == ["crit-1", "crit-2", "high-1", "med-1", "low-1", "low-2"]
    twice = sort_by_severity(once)
    assert [f.resource_id for f in twice] == [f.resource_id for f in once]


def test_sort_does_not_mutate_input():
    findings = sample()
    sort_by_severity(findings)
    assert findings[0].resource_id == "low-1"


def test_group_by_severity_has_every_level():
    groups = group_by_severity(sample())
    assert list(groups) == [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]
    assert [f.resource_id for f in groups[Severity.CRITICAL]] == ["crit-1", "crit-2"]


def test_json_report():
    data = json.loads(findings_to_json(sort_by_severity(sample())))
    assert len(data) == 6
    assert list(data[0]) == FIELDS
    assert data[0]["severity"] == "CRITICAL"
    assert data[0]["timestamp"].endswith("+00:00")


def test_empty_json_report_is_empty_array():
    assert json.loads(findings_to_json([])) == []


def test_csv_report():
    rows = list(csv.DictReader(io.StringIO(findings_to_csv(sample()))))
    assert len(rows) == 6
    assert list(rows[0]) == FIELDS
    assert rows[1]["resource_id"] == "crit-1"


def test_save_report_creates_directories(tmp_path):
    path = tmp_path / "reports" / "nested" / "scan.json"
    save_report(findings_to_json(sample()), str(path))
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 6


def test_html_report_contains_rows(tmp_path):
    findings = sort_by_severity(sample())
    findings.append(Finding("<script>", ResourceType.SECURITY_GROUP, Severity.LOW, "x & y", "d"))
    html_path = save_report(findings_to_html(findings, "us-east-1"), str(tmp_path / "scan.html"))

    with open(html_path, "r", encoding="utf-8") as fh:
        soup = BeautifulSoup(fh, "html.parser")

    assert "region: us-east-1" in soup.find("h2").get_text(strip=True)
    assert "Total findings: 7" in soup.find("p").get_text()

    rows = soup.find("table").find_all("tr")
    assert len(rows) == 8
    first = [td.get_text(strip=True) for td in rows[1].find_all("td")]
    assert first[:4] == ["CRITICAL", "S3_BUCKET", "crit-1", "title crit-1"]
    last = [td.get_text(strip=True) for td in rows[-1].find_all("td")]
    assert last[2] == "<script>"
    assert last[3] == "x & y"
    assert soup.find("script") is None


def test_console_report_groups_by_severity():
    console = recording_console()
    print_console(sort_by_severity(sample()), console)
    out = console.file.getvalue()
    assert "SECURITY FINDINGS" in out
    assert out.index("CRITICAL (2 findings)") < out.index("HIGH (1 findings)") < out.index("LOW (2 findings)")
    assert "Resource: crit-1 (S3_BUCKET)" in out
    assert "Region: us-east-1" in out
    assert "Total Findings: 6" in out


def test_console_report_empty():
    console = recording_console()
    print_console([], console)
    assert "No security issues found" in console.file.getvalue()


def test_table_report():
    console = recording_console()
    print_table(sample(), console)
    out = console.file.getvalue()
    for header in ("Severity", "Resource Type", "Resource ID", "Title"):
        assert header in out
    assert "crit-2" in out
