# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schema for release-scholar.

The audit engine and the archive builder treat the config as an opaque,
already-validated struct, so everything they rely on is checked here.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

_MODEL_CONFIG = ConfigDict(frozen=True, extra="forbid", validate_default=True)


class AuthorConfig(BaseModel):
    """Default author used when scaffolding LICENSE and CITATION.cff."""

    model_config = _MODEL_CONFIG

    name: Optional[str] = Field(default=None, description="Full name, e.g. 'Ada Lovelace'")
    orcid: Optional[str] = Field(
        default=None, description="ORCID iD as a URL, e.g. https://orcid.org/0000-0002-1825-0097"
    )
    email: Optional[str] = Field(default=None, description="Contact address")


class MirrorsConfig(BaseModel):
    """
    Credentials for push mirrors. Usually lives in the machine-level config so
    tokens never end up in a project repository.
    """

    model_config = _MODEL_CONFIG

    codeberg_user: Optional[str] = None
    codeberg_token: Optional[str] = None
    github_user: Optional[str] = None
    github_token: Optional[str] = None
    gitlab_user: Optional[str] = None
    gitlab_token: Optional[str] = None


class SizeConfig(BaseModel):
    """
    Size thresholds for the Size audit category, in bytes (decimal megabytes).
    Reaching a warn threshold yields a warning, reaching a fail threshold a failure.
    """

    model_config = _MODEL_CONFIG

    file_warn_bytes: int = Field(default=1_000_000, ge=1, description="Per-file warning (1 MB)")
    file_fail_bytes: int = Field(default=10_000_000, ge=1, description="Per-file failure (10 MB)")
    total_warn_bytes: int = Field(default=50_000_000, ge=1, description="Whole tree warning (50 MB)")
    total_fail_bytes: int = Field(
        default=200_000_000, ge=1, description="Whole tree failure (200 MB)"
    )

    @model_validator(mode="after")
    def _warn_below_fail(self) -> "SizeConfig":
        if self.file_warn_bytes > self.file_fail_bytes:
            raise ValueError("file_warn_bytes must not exceed file_fail_bytes")
        if self.total_warn_bytes > self.total_fail_bytes:
            raise ValueError("total_warn_bytes must not exceed total_fail_bytes")
        return self


class ReleaseScholarConfig(BaseModel):
    """
    The resolved configuration for one project: the project file merged over
    the machine-level file, with schema defaults for anything neither sets.
    """

    model_config = _MODEL_CONFIG

    project_name: Optional[str] = Field(
        default=None,
        description="Name used in archive file names; defaults to the project directory name",
    )
    forge: Literal["codeberg", "github", "gitlab"] = Field(
        default="codeberg", description="Where the canonical repository is hosted"
    )
    forge_url: Optional[str] = Field(
        default=None, description="Base URL of a self-hosted forge, e.g. https://git.example.org"
    )
    required_files: list[str] = Field(
        default_factory=lambda: ["LICENSE", "README.md", "CHANGELOG.md", "CITATION.cff"],
        description="Files that must be tracked for a release to pass the Files audit",
    )
    archive_dir: str = Field(
        default="release",
        description="Where release bundles are written, relative to the project root",
    )
    language: str = Field(
        default="eng",
        min_length=3,
        max_length=3,
        description="ISO 639-3 language code written into the publication metadata",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    author: Optional[AuthorConfig] = Field(default=None)
    mirrors: Optional[MirrorsConfig] = Field(default=None)
    size: SizeConfig = Field(default_factory=SizeConfig)
