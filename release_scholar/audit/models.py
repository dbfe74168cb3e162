# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Findings and the report they are collected into.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class Category(str, Enum):
    """Audit categories, declared in report order."""

    GIT = "Git"
    FILES = "Files"
    CITATION = "Citation"
    SECURITY = "Security"
    GITIGNORE = "Gitignore"
    SIZE = "Size"

    @property
    def rank(self) -> int:
        return _CATEGORY_ORDER.index(self)


_CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)


class Severity(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True)
class Finding:
    """One audit result. `path` and `line` point at the offending file, if any."""

    category: Category
    severity: Severity
    message: str
    path: Optional[str] = None
    line: Optional[int] = None


def passed(category: Category, message: str, path: Optional[str] = None) -> Finding:
    return Finding(category, Severity.PASS, message, path)


def warned(
    category: Category, message: str, path: Optional[str] = None, line: Optional[int] = None
) -> Finding:
    return Finding(category, Severity.WARN, message, path, line)


def failed(
    category: Category, message: str, path: Optional[str] = None, line: Optional[int] = None
) -> Finding:
    return Finding(category, Severity.FAIL, message, path, line)


def order_findings(findings: Iterable[Finding]) -> tuple[Finding, ...]:
    """
    Put findings into report order.

    The sort is stable and keyed only on category, so findings keep the order
    their check emitted them in.
    """
    return tuple(sorted(findings, key=lambda finding: finding.category.rank))


@dataclass(frozen=True)
class AuditReport:
    """The complete, ordered result of one audit run."""

    findings: tuple[Finding, ...]

    @property
    def status(self) -> Severity:
        """fail if anything failed, else warn if anything warned, else pass."""
        severities = {finding.severity for finding in self.findings}
        if Severity.FAIL in severities:
            return Severity.FAIL
        if Severity.WARN in severities:
            return Severity.WARN
        return Severity.PASS

    @property
    def has_failures(self) -> bool:
        return self.status is Severity.FAIL

    def count(self, severity: Severity) -> int:
        return sum(1 for finding in self.findings if finding.severity is severity)

    def by_category(self, category: Category) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.findings if finding.category is category)
