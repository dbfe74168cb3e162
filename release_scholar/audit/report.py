# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Plain-text rendering of an AuditReport for the terminal.

One line per finding, in report order, then a summary and a verdict:

      [PASS] Git: Working directory is clean
      [FAIL] Files: CHANGELOG.md is missing
      ...
      12 passed, 1 failed, 2 warnings

      Release is NOT ready.
"""

from typing import TextIO

from release_scholar.audit.models import AuditReport, Finding, Severity

REPORT_TITLE = "=== Release Scholar Report ==="

_MARKERS = {
    Severity.PASS: "[PASS]",
    Severity.WARN: "[WARN]",
    Severity.FAIL: "[FAIL]",
}

_VERDICTS = {
    Severity.PASS: "Release is ready!",
    Severity.WARN: "Release is ready (with warnings).",
    Severity.FAIL: "Release is NOT ready.",
}


def format_finding(finding: Finding) -> str:
    location = ""
    if finding.path is not None and finding.line is not None:
        location = f" [{finding.path}:{finding.line}]"
    return f"{_MARKERS[finding.severity]} {finding.category.value}: {finding.message}{location}"


def render_report(report: AuditReport, stream: TextIO) -> None:
    lines = ["", REPORT_TITLE, ""]
    lines.extend(f"  {format_finding(finding)}" for finding in report.findings)
    lines.append("")
    lines.append(
        f"  {report.count(Severity.PASS)} passed, "
        f"{report.count(Severity.FAIL)} failed, "
        f"{report.count(Severity.WARN)} warnings"
    )
    lines.append("")
    lines.append(f"  {_VERDICTS[report.status]}")
    lines.append("")
    stream.write("\n".join(lines) + "\n")
    stream.flush()
