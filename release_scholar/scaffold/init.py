# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
`release-scholar init`: starter metadata files for a scholarly release.

Writes whichever of CITATION.cff, CHANGELOG.md, LICENSE and
.release-scholar.yaml are missing. Existing files are never touched, so init
is safe to re-run.
"""

import datetime
import logging
from pathlib import Path
from typing import Optional

import yaml

from release_scholar.config.loader import PROJECT_CONFIG_NAME, resolve_project_name
from release_scholar.config.schema import AuthorConfig, ReleaseScholarConfig
from release_scholar.logging.logger import get_logger
from release_scholar.metadata.citation import CITATION_FILE
from release_scholar.utils.filesystem import atomic_write

_logger: logging.Logger = get_logger(__name__)

CFF_VERSION = "1.2.0"
INITIAL_VERSION = "0.1.0"
PLACEHOLDER_AUTHOR = "Your Name"

MIT_LICENSE = """\
MIT License

Copyright (c) {year} {holder}

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

CHANGELOG = """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]

## [{version}] - {date}

### Added

- Initial release.
"""

PROJECT_CONFIG = """\
# release-scholar project configuration.
# Machine-wide defaults (author, mirror credentials) belong in
# ~/.config/release-scholar/config.yaml instead.

forge: {forge}
archive_dir: {archive_dir}
language: {language}
required_files:
{required_files}
"""


def _split_name(full_name: str) -> tuple[str, str]:
    """'Ada King Lovelace' -> ('Ada King', 'Lovelace'). A single word is a family name."""
    parts = full_name.split()
    if len(parts) < 2:
        return "", full_name.strip()
    return " ".join(parts[:-1]), parts[-1]


def render_citation(
    title: str, author: Optional[AuthorConfig], today: datetime.date
) -> str:
    given, family = _split_name((author.name if author else None) or PLACEHOLDER_AUTHOR)
    entry: dict[str, str] = {"family-names": family}
    if given:
        entry["given-names"] = given
    if author is not None and author.orcid:
        entry["orcid"] = author.orcid
    if author is not None and author.email:
        entry["email"] = author.email

    document = {
        "cff-version": CFF_VERSION,
        "message": "If you use this software, please cite it using these metadata.",
        "type": "software",
        "title": title,
        "version": INITIAL_VERSION,
        "date-released": today.isoformat(),
        "license": "MIT",
        "authors": [entry],
    }
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def render_project_config(config: ReleaseScholarConfig) -> str:
    required = "\n".join(f"  - {name}" for name in config.required_files)
    return PROJECT_CONFIG.format(
        forge=config.forge,
        archive_dir=config.archive_dir,
        language=config.language,
        required_files=required,
    )


def init_project(
    project_dir: Path,
    config: ReleaseScholarConfig,
    today: Optional[datetime.date] = None,
) -> list[Path]:
    """
    Create the missing starter files in `project_dir`.

    Returns:
        The paths that were created, in creation order.

    Raises:
        OSError: If a file cannot be written.
    """
    today = today or datetime.date.today()
    holder = (config.author.name if config.author else None) or PLACEHOLDER_AUTHOR
    title = resolve_project_name(config, project_dir)

    templates: list[tuple[str, str]] = [
        (CITATION_FILE, render_citation(title, config.author, today)),
        ("CHANGELOG.md", CHANGELOG.format(version=INITIAL_VERSION, date=today.isoformat())),
        ("LICENSE", MIT_LICENSE.format(year=today.year, holder=holder)),
        (PROJECT_CONFIG_NAME, render_project_config(config)),
    ]

    created: list[Path] = []
    for name, content in templates:
        target = project_dir / name
        if target.exists():
            _logger.info("Keeping existing file", extra={"path": str(target)})
            continue
        atomic_write(target, content)
        created.append(target)
        _logger.info("Created file", extra={"path": str(target)})
    return created
