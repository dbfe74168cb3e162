# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for ecosystem detection from tracked paths.
"""

from release_scholar.audit.ecosystems import (
    ARTIFACT_PATTERNS,
    Ecosystem,
    detect_ecosystems,
    is_vendored,
)


class TestDetectEcosystems:
    def test_no_paths_no_ecosystems(self) -> None:
        assert detect_ecosystems([]) == frozenset()

    def test_marker_file_at_any_depth(self) -> None:
        assert detect_ecosystems(["tools/helper/Cargo.toml"]) == {Ecosystem.RUST}

    def test_marker_files_per_ecosystem(self) -> None:
        found = detect_ecosystems(["pyproject.toml", "package.json", "pom.xml"])
        assert found == {Ecosystem.PYTHON, Ecosystem.NODE, Ecosystem.JAVA}

    def test_source_files_need_a_minimum_count(self) -> None:
        assert detect_ecosystems(["a.py", "b.py"]) == frozenset()
        assert detect_ecosystems(["a.py", "b.py", "pkg/c.py"]) == {Ecosystem.PYTHON}

    def test_vendored_paths_are_ignored(self) -> None:
        paths = ["node_modules/left-pad/package.json", "vendor/lib/x.js", "vendor/lib/y.js", "z.js"]
        assert detect_ecosystems(paths) == frozenset()

    def test_unrelated_files_detect_nothing(self) -> None:
        assert detect_ecosystems(["README.md", "LICENSE", "docs/index.html"]) == frozenset()


class TestIsVendored:
    def test_directory_component_counts(self) -> None:
        assert is_vendored("node_modules/pkg/index.js") is True
        assert is_vendored("web/node_modules/pkg/index.js") is True

    def test_file_name_alone_does_not_count(self) -> None:
        assert is_vendored("docs/vendor") is False
        assert is_vendored("src/vendor.py") is False


class TestArtifactPatterns:
    def test_every_ecosystem_has_patterns(self) -> None:
        for ecosystem in Ecosystem:
            assert ARTIFACT_PATTERNS[ecosystem]

    def test_rust_only_needs_target(self) -> None:
        assert [pattern for pattern, _ in ARTIFACT_PATTERNS[Ecosystem.RUST]] == ["target/"]
