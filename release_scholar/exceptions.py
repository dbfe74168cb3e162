# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error kinds shared across release-scholar.

Configuration errors live in release_scholar.config.exceptions so the CLI can
catch them without importing the rest of the config machinery, but they derive
from the same base so a caller can catch everything with one clause.
"""


class ReleaseScholarError(Exception):
    """Base for every error raised deliberately by release-scholar."""


class RepositoryError(ReleaseScholarError):
    """The directory is not a git working tree, or its history cannot be read."""


class ParseError(ReleaseScholarError):
    """A metadata document (usually CITATION.cff) is malformed."""


class IoError(ReleaseScholarError):
    """A file could not be read, or an output path could not be written."""


class RemoteServiceError(ReleaseScholarError):
    """A deposit or forge API answered with an error, or could not be reached."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
