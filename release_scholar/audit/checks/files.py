# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

from release_scholar.audit.models import Category, Finding, failed, passed
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.git.snapshot import ProjectSnapshot


def check_files(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    """One finding per required file: tracked passes, anything else fails."""
    findings: list[Finding] = []
    for name in config.required_files:
        if snapshot.get(name) is not None:
            findings.append(passed(Category.FILES, f"{name} exists", path=name))
        else:
            findings.append(failed(Category.FILES, f"{name} is missing", path=name))
    return findings
