# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Audit engine: runs every category against one snapshot and orders the result.

The engine never stops early. A category that hits an internal error (an
unreadable history, a broken file) contributes one fail Finding describing
the error and the remaining categories still run, so one `check` always shows
the complete picture.
"""

import logging
from pathlib import Path
from typing import Callable

from release_scholar.audit.checks.citation import check_citation
from release_scholar.audit.checks.files import check_files
from release_scholar.audit.checks.git_state import check_git
from release_scholar.audit.checks.gitignore import check_gitignore
from release_scholar.audit.checks.security import check_security
from release_scholar.audit.checks.size import check_size
from release_scholar.audit.models import AuditReport, Category, Finding, Severity, failed, order_findings
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.exceptions import ReleaseScholarError, RepositoryError
from release_scholar.git.snapshot import ProjectSnapshot, snapshot_working_tree
from release_scholar.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)

CheckFunction = Callable[[ProjectSnapshot, ReleaseScholarConfig], list[Finding]]

CHECKS: tuple[tuple[Category, CheckFunction], ...] = (
    (Category.GIT, check_git),
    (Category.FILES, check_files),
    (Category.CITATION, check_citation),
    (Category.SECURITY, check_security),
    (Category.GITIGNORE, check_gitignore),
    (Category.SIZE, check_size),
)


def run_checks(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> AuditReport:
    """Run every category against an existing snapshot."""
    findings: list[Finding] = []
    for category, check in CHECKS:
        try:
            produced = check(snapshot, config)
        except Exception as err:
            _logger.warning(
                "Audit category could not complete",
                extra={"category": category.value, "error": str(err)},
                exc_info=not isinstance(err, ReleaseScholarError),
            )
            produced = [failed(category, f"Could not complete {category.value} audit: {err}")]
        findings.extend(produced)

    report = AuditReport(findings=order_findings(findings))
    _logger.info(
        "Audit complete",
        extra={
            "status": report.status.value,
            "passed": report.count(Severity.PASS),
            "warnings": report.count(Severity.WARN),
            "failures": report.count(Severity.FAIL),
        },
    )
    return report


def run_audit(project_dir: Path, config: ReleaseScholarConfig) -> AuditReport:
    """
    Snapshot the working tree at `project_dir` and audit it.

    If the directory is not a git working tree the Git category says so and
    every other category runs against an empty snapshot.
    """
    _logger.info("Starting audit", extra={"project_dir": str(project_dir)})
    try:
        snapshot = snapshot_working_tree(project_dir)
    except RepositoryError as err:
        _logger.warning("Cannot snapshot repository", extra={"error": str(err)})
        report = run_checks(ProjectSnapshot.empty(project_dir), config)
        # Replace the Git category: with no repository its own findings are noise.
        others = [finding for finding in report.findings if finding.category is not Category.GIT]
        return AuditReport(
            findings=order_findings([failed(Category.GIT, f"Cannot open repository: {err}"), *others])
        )
    return run_checks(snapshot, config)
