# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config schema models directly, without going through the loader.
"""

import pytest
from pydantic import ValidationError

from release_scholar.config.schema import (
    AuthorConfig,
    MirrorsConfig,
    ReleaseScholarConfig,
    SizeConfig,
)


class TestSizeConfig:
    def test_default_thresholds(self) -> None:
        size = SizeConfig()
        assert size.file_warn_bytes == 1_000_000
        assert size.file_fail_bytes == 10_000_000
        assert size.total_warn_bytes == 50_000_000
        assert size.total_fail_bytes == 200_000_000

    def test_warn_above_fail_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SizeConfig(file_warn_bytes=20, file_fail_bytes=10)

    def test_total_warn_above_fail_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SizeConfig(total_warn_bytes=20, total_fail_bytes=10)

    def test_zero_threshold_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SizeConfig(file_warn_bytes=0)


class TestReleaseScholarConfig:
    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            ReleaseScholarConfig(unexpected=True)  # type: ignore[call-arg]

    def test_language_must_be_three_letters(self) -> None:
        with pytest.raises(ValidationError):
            ReleaseScholarConfig(language="en")

    def test_nested_sections_from_dicts(self) -> None:
        config = ReleaseScholarConfig.model_validate(
            {
                "author": {"name": "Ada Lovelace"},
                "mirrors": {"codeberg_user": "ada", "codeberg_token": "secret"},
            }
        )
        assert isinstance(config.author, AuthorConfig)
        assert isinstance(config.mirrors, MirrorsConfig)
        assert config.mirrors.github_token is None

    def test_nested_models_are_frozen(self) -> None:
        config = ReleaseScholarConfig(author=AuthorConfig(name="Ada"))
        assert config.author is not None
        with pytest.raises(ValidationError):
            config.author.name = "Charles"  # type: ignore[misc]
