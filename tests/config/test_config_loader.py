# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config loader: layering, validation, and failure modes.

We test five things:
  1. No config files at all yields the schema defaults
  2. The project layer wins over the machine layer, field by field
  3. Unknown fields and wrong types raise ConfigValidationError
  4. Broken YAML raises ConfigLoadError
  5. Loaded config is truly immutable
"""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from release_scholar.config.exceptions import ConfigLoadError, ConfigValidationError
from release_scholar.config.loader import (
    PROJECT_CONFIG_NAME,
    config_home,
    global_config_path,
    load_config,
    merge_layers,
    resolve_project_name,
)
from release_scholar.config.schema import ReleaseScholarConfig


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestDefaults:
    def test_no_files_yields_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.forge == "codeberg"
        assert config.archive_dir == "release"
        assert config.required_files == ["LICENSE", "README.md", "CHANGELOG.md", "CITATION.cff"]
        assert config.author is None
        assert config.mirrors is None

    def test_empty_project_file_is_empty_layer(self, tmp_path: Path) -> None:
        (tmp_path / PROJECT_CONFIG_NAME).write_text("", encoding="utf-8")
        config = load_config(tmp_path)
        assert config.language == "eng"


class TestLayering:
    def test_machine_layer_fills_gaps(self, tmp_path: Path, config_home_dir: Path) -> None:
        _write(
            config_home_dir / "config.yaml",
            """\
            author:
              name: Ada Lovelace
              orcid: https://orcid.org/0000-0002-1825-0097
            forge: gitlab
            """,
        )
        _write(
            tmp_path / PROJECT_CONFIG_NAME,
            """\
            author:
              email: ada@example.org
            """,
        )

        config = load_config(tmp_path)
        assert config.forge == "gitlab"
        assert config.author is not None
        assert config.author.name == "Ada Lovelace"
        assert config.author.email == "ada@example.org"

    def test_project_layer_wins(self, tmp_path: Path, config_home_dir: Path) -> None:
        _write(config_home_dir / "config.yaml", "archive_dir: dist\n")
        _write(tmp_path / PROJECT_CONFIG_NAME, "archive_dir: out\n")
        assert load_config(tmp_path).archive_dir == "out"

    def test_explicit_config_path_replaces_project_file(self, tmp_path: Path) -> None:
        _write(tmp_path / PROJECT_CONFIG_NAME, "archive_dir: ignored\n")
        explicit = _write(tmp_path / "alt.yaml", "archive_dir: chosen\n")
        assert load_config(tmp_path, config_path=explicit).archive_dir == "chosen"

    def test_merge_replaces_lists_whole(self) -> None:
        merged = merge_layers({"required_files": ["LICENSE"]}, {"required_files": ["A", "B"]})
        assert merged["required_files"] == ["LICENSE"]

    def test_merge_treats_none_as_unset(self) -> None:
        merged = merge_layers({"forge": None}, {"forge": "github"})
        assert merged["forge"] == "github"


class TestLoadInvalidConfig:
    def test_unknown_field_raises_validation_error(self, tmp_path: Path) -> None:
        _write(tmp_path / PROJECT_CONFIG_NAME, "some_nonsense_field: true\n")
        with pytest.raises(ConfigValidationError):
            load_config(tmp_path)

    def test_wrong_type_raises_validation_error(self, tmp_path: Path) -> None:
        _write(tmp_path / PROJECT_CONFIG_NAME, "required_files: 42\n")
        with pytest.raises(ConfigValidationError):
            load_config(tmp_path)

    def test_unknown_forge_raises_validation_error(self, tmp_path: Path) -> None:
        _write(tmp_path / PROJECT_CONFIG_NAME, "forge: sourcehut\n")
        with pytest.raises(ConfigValidationError):
            load_config(tmp_path)

    def test_broken_yaml_raises_load_error(self, tmp_path: Path, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path, config_path=broken_yaml_file)

    def test_non_mapping_raises_load_error(self, tmp_path: Path) -> None:
        _write(tmp_path / PROJECT_CONFIG_NAME, "- just\n- a list\n")
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path)

    def test_missing_explicit_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path, config_path=tmp_path / "does_not_exist.yaml")

    def test_directory_path_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path, config_path=tmp_path)


class TestImmutability:
    def test_loaded_config_is_frozen(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        with pytest.raises(ValidationError):
            config.archive_dir = "elsewhere"  # type: ignore[misc]


class TestPaths:
    def test_config_home_honours_override(self, config_home_dir: Path) -> None:
        assert config_home() == config_home_dir
        assert global_config_path() == config_home_dir / "config.yaml"

    def test_config_home_falls_back_to_xdg(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("RELEASE_SCHOLAR_CONFIG_HOME", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert config_home() == tmp_path / "release-scholar"

    def test_project_name_defaults_to_directory(
        self, tmp_path: Path, default_config: ReleaseScholarConfig
    ) -> None:
        project = tmp_path / "my-tool"
        project.mkdir()
        assert resolve_project_name(default_config, project) == "my-tool"

    def test_configured_project_name_wins(self, tmp_path: Path) -> None:
        _write(tmp_path / PROJECT_CONFIG_NAME, "project_name: renamed\n")
        config = load_config(tmp_path)
        assert resolve_project_name(config, tmp_path) == "renamed"
