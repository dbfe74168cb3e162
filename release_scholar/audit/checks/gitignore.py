# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Gitignore category: build-artifact patterns for the ecosystems actually present.

A missing .gitignore is already a Security warning, so here it simply means
every artifact pattern is missing.
"""

from release_scholar.audit.checks.security import GITIGNORE_FILE, gitignore_contains, read_gitignore
from release_scholar.audit.ecosystems import ARTIFACT_PATTERNS, detect_ecosystems
from release_scholar.audit.models import Category, Finding, passed, warned
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.git.snapshot import ProjectSnapshot


def check_gitignore(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    ecosystems = detect_ecosystems(snapshot.paths)
    if not ecosystems:
        return [passed(Category.GITIGNORE, "No known language ecosystem detected")]

    content = read_gitignore(snapshot) or ""
    findings: list[Finding] = []
    checked: set[str] = set()

    # Sorted by name so the order doesn't depend on set iteration.
    for ecosystem in sorted(ecosystems, key=lambda item: item.value):
        for pattern, description in ARTIFACT_PATTERNS[ecosystem]:
            if pattern in checked:
                continue
            checked.add(pattern)
            if not gitignore_contains(content, pattern):
                findings.append(
                    warned(
                        Category.GITIGNORE,
                        f"Missing build artifact pattern: {pattern} ({description})",
                        path=GITIGNORE_FILE,
                    )
                )

    names = ", ".join(sorted(ecosystem.value for ecosystem in ecosystems))
    if not findings:
        findings.append(
            passed(Category.GITIGNORE, f"Covers build artifact patterns for detected languages: {names}")
        )
    return findings
