# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the Files category.
"""

from release_scholar.audit.checks.files import check_files
from release_scholar.audit.models import Category, Severity
from release_scholar.config.schema import ReleaseScholarConfig


class TestCheckFiles:
    def test_one_finding_per_required_file(self, make_snapshot, default_config) -> None:
        snapshot = make_snapshot({"LICENSE": "MIT", "README.md": "# x", "CITATION.cff": ""})
        findings = check_files(snapshot, default_config)

        assert [(finding.message, finding.severity) for finding in findings] == [
            ("LICENSE exists", Severity.PASS),
            ("README.md exists", Severity.PASS),
            ("CHANGELOG.md is missing", Severity.FAIL),
            ("CITATION.cff exists", Severity.PASS),
        ]
        assert all(finding.category is Category.FILES for finding in findings)

    def test_configured_list_replaces_default(self, make_snapshot) -> None:
        config = ReleaseScholarConfig(required_files=["NOTICE"])
        findings = check_files(make_snapshot({"LICENSE": "MIT"}), config)
        assert len(findings) == 1
        assert findings[0].message == "NOTICE is missing"
        assert findings[0].path == "NOTICE"

    def test_nested_file_does_not_satisfy_top_level_requirement(self, make_snapshot, default_config) -> None:
        findings = check_files(make_snapshot({"docs/LICENSE": "MIT"}), default_config)
        assert findings[0].severity is Severity.FAIL
