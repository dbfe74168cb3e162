# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads the project and machine-level YAML files, merges them,
and produces a validated, frozen ReleaseScholarConfig.

The loading pipeline is linear:
  1. Read and parse each layer (missing default files count as empty layers)
  2. Merge the layers field by field, project values first
  3. Hand the merged dict to pydantic for schema validation
  4. Return the frozen config object

A broken config stops the command before it does anything. There are no
silent fallbacks to defaults when a file exists but is invalid.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from release_scholar.config.exceptions import ConfigLoadError, ConfigValidationError
from release_scholar.config.schema import ReleaseScholarConfig

PROJECT_CONFIG_NAME = ".release-scholar.yaml"
GLOBAL_CONFIG_NAME = "config.yaml"
APP_DIR_NAME = "release-scholar"
CONFIG_HOME_ENV = "RELEASE_SCHOLAR_CONFIG_HOME"


def config_home() -> Path:
    """
    Directory holding machine-level state: config.yaml and deposit tokens.

    RELEASE_SCHOLAR_CONFIG_HOME wins, then $XDG_CONFIG_HOME/release-scholar,
    then ~/.config/release-scholar.
    """
    override = os.environ.get(CONFIG_HOME_ENV)
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_DIR_NAME


def global_config_path() -> Path:
    """Path of the machine-level config file (it need not exist)."""
    return config_home() / GLOBAL_CONFIG_NAME


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed mapping.

    An empty file is an empty mapping.

    Raises:
        ConfigLoadError: If the file isn't readable, isn't valid YAML, or
            doesn't contain a mapping.
    """
    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file {config_path} must contain a YAML mapping, got {type(parsed).__name__}"
        )
    return parsed


def _read_optional_layer(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    return _read_yaml_file(path)


def merge_layers(project: Mapping[str, Any], machine: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merge two config layers field by field.

    Project values take priority; machine-level values fill the gaps. Nested
    mappings (author, mirrors, size) are merged recursively, so a project that
    sets only `author.orcid` still inherits `author.name` from the machine
    config. Lists and scalars are replaced as a whole. A project value of
    None counts as unset.
    """
    merged: dict[str, Any] = dict(machine)
    for key, value in project.items():
        if value is None and key in machine:
            continue
        fallback = machine.get(key)
        if isinstance(value, Mapping) and isinstance(fallback, Mapping):
            merged[key] = merge_layers(value, fallback)
        else:
            merged[key] = value
    return merged


def validate_config(raw_data: Mapping[str, Any], source: str = "<merged>") -> ReleaseScholarConfig:
    """
    Validate a raw mapping into a frozen ReleaseScholarConfig.

    Raises:
        ConfigValidationError: Schema violations (unknown keys, wrong types).
    """
    try:
        return ReleaseScholarConfig.model_validate(dict(raw_data))
    except ValidationError as err:
        raise ConfigValidationError(f"Config validation failed for {source}:\n{err}") from err


def load_config(
    project_dir: Path,
    config_path: Optional[Path] = None,
    machine_config_path: Optional[Path] = None,
) -> ReleaseScholarConfig:
    """
    Load, merge, validate, and freeze the configuration for a project.

    Args:
        project_dir: The project root. Its .release-scholar.yaml is the project
            layer unless `config_path` is given.
        config_path: Explicit project-layer file. Unlike the default location,
            an explicit path must exist.
        machine_config_path: Machine-level layer; defaults to global_config_path().

    Returns:
        A fully validated, frozen ReleaseScholarConfig.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations.
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigLoadError(f"Config file not found: {config_path}")
        project_layer = _read_yaml_file(config_path)
    else:
        project_layer = _read_optional_layer(project_dir / PROJECT_CONFIG_NAME)

    machine_path = machine_config_path if machine_config_path is not None else global_config_path()
    machine_layer = _read_optional_layer(machine_path)

    merged = merge_layers(project_layer, machine_layer)
    return validate_config(merged, source=str(config_path or project_dir / PROJECT_CONFIG_NAME))


def resolve_project_name(config: ReleaseScholarConfig, project_dir: Path) -> str:
    """The configured project name, or the project directory's name."""
    if config.project_name:
        return config.project_name
    return project_dir.resolve().name
