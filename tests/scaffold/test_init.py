# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for `init` scaffolding.
"""

import datetime
from pathlib import Path

from release_scholar.audit.checks.citation import check_citation
from release_scholar.audit.models import Severity
from release_scholar.config.loader import PROJECT_CONFIG_NAME, load_config
from release_scholar.config.schema import AuthorConfig, ReleaseScholarConfig
from release_scholar.git.snapshot import ProjectSnapshot, TrackedFile
from release_scholar.metadata.citation import parse_citation
from release_scholar.scaffold.init import init_project, render_citation

TODAY = datetime.date(2024, 3, 14)


class TestInitProject:
    def test_creates_all_starter_files(self, tmp_path: Path, default_config: ReleaseScholarConfig) -> None:
        created = init_project(tmp_path, default_config, today=TODAY)
        assert [path.name for path in created] == [
            "CITATION.cff",
            "CHANGELOG.md",
            "LICENSE",
            PROJECT_CONFIG_NAME,
        ]

    def test_second_run_changes_nothing(self, tmp_path: Path, default_config: ReleaseScholarConfig) -> None:
        init_project(tmp_path, default_config, today=TODAY)
        before = {path.name: path.read_bytes() for path in tmp_path.iterdir()}

        assert init_project(tmp_path, default_config, today=TODAY) == []
        assert {path.name: path.read_bytes() for path in tmp_path.iterdir()} == before

    def test_existing_files_are_kept(self, tmp_path: Path, default_config: ReleaseScholarConfig) -> None:
        (tmp_path / "LICENSE").write_text("Apache-2.0\n", encoding="utf-8")
        created = init_project(tmp_path, default_config, today=TODAY)

        assert "LICENSE" not in [path.name for path in created]
        assert (tmp_path / "LICENSE").read_text(encoding="utf-8") == "Apache-2.0\n"

    def test_license_and_changelog_content(self, tmp_path: Path) -> None:
        config = ReleaseScholarConfig(author=AuthorConfig(name="Ada Lovelace"))
        init_project(tmp_path, config, today=TODAY)

        assert "Copyright (c) 2024 Ada Lovelace" in (tmp_path / "LICENSE").read_text(encoding="utf-8")
        changelog = (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8")
        assert "## [0.1.0] - 2024-03-14" in changelog

    def test_project_config_loads_back(self, tmp_path: Path) -> None:
        config = ReleaseScholarConfig(archive_dir="dist-release", language="fra")
        init_project(tmp_path, config, today=TODAY)

        loaded = load_config(tmp_path)
        assert loaded.archive_dir == "dist-release"
        assert loaded.language == "fra"
        assert loaded.required_files == config.required_files


class TestRenderCitation:
    def test_generated_citation_passes_the_audit(self, tmp_path: Path) -> None:
        author = AuthorConfig(name="Ada King Lovelace", orcid="https://orcid.org/0000-0002-1825-0097")
        text = render_citation("example-tool", author, TODAY)
        snapshot = ProjectSnapshot.build(root=tmp_path, files=[TrackedFile("CITATION.cff", text.encode())])

        findings = check_citation(snapshot, ReleaseScholarConfig())
        assert [f.message for f in findings if f.severity is Severity.FAIL] == []

    def test_author_name_is_split(self) -> None:
        record = parse_citation(render_citation("t", AuthorConfig(name="Ada King Lovelace"), TODAY))
        assert record.authors[0].family_names == "Lovelace"
        assert record.authors[0].given_names == "Ada King"
        assert record.version == "0.1.0"
        assert record.date_released == "2024-03-14"

    def test_placeholder_without_author(self) -> None:
        record = parse_citation(render_citation("t", None, TODAY))
        assert record.authors[0].display_name == "Name, Your"
