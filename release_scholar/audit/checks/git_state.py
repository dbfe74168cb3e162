# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Git category: clean working tree and a release tag at HEAD.
"""

import re
from pathlib import PurePosixPath
from typing import Iterable, Optional

from release_scholar.audit.models import Category, Finding, failed, passed
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.git.snapshot import ProjectSnapshot

SEMVER_TAG = re.compile(r"^v(\d+)\.(\d+)\.(\d+)$")
DIRTY_PATHS_SHOWN = 5


def select_release_tag(tags: Iterable[str]) -> Optional[str]:
    """
    The release tag among `tags`, or None if none is `vMAJOR.MINOR.PATCH`.

    With several candidates the greatest version wins, compared numerically
    (v0.10.0 beats v0.9.0).
    """
    best: Optional[tuple[tuple[int, int, int], str]] = None
    for tag in tags:
        match = SEMVER_TAG.match(tag)
        if match is None:
            continue
        key = (int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if best is None or key > best[0]:
            best = (key, tag)
    return best[1] if best is not None else None


def tag_version(tag: str) -> str:
    """`v1.2.3` -> `1.2.3`."""
    return tag[1:] if tag.startswith("v") else tag


def outside_archive_dir(paths: Iterable[str], archive_dir: str) -> list[str]:
    """
    Drop paths under `archive_dir`, where `build` writes its bundles.

    An archive_dir outside the project (absolute or climbing with `..`) filters
    nothing.
    """
    archive = PurePosixPath(archive_dir)
    if archive.is_absolute() or ".." in archive.parts or not archive.parts:
        return list(paths)
    prefix = archive.parts
    return [path for path in paths if PurePosixPath(path).parts[: len(prefix)] != prefix]


def check_git(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    findings: list[Finding] = []
    dirty_paths = outside_archive_dir(snapshot.dirty_paths, config.archive_dir)

    if snapshot.clean or (snapshot.dirty_paths and not dirty_paths):
        findings.append(passed(Category.GIT, "Working directory is clean"))
    else:
        shown = ", ".join(dirty_paths[:DIRTY_PATHS_SHOWN])
        more = len(dirty_paths) - DIRTY_PATHS_SHOWN
        if more > 0:
            shown += f" (and {more} more)"
        findings.append(
            failed(
                Category.GIT,
                f"Working directory has {len(dirty_paths)} uncommitted change(s): {shown}",
            )
        )

    if snapshot.commit is None:
        findings.append(failed(Category.GIT, "Repository has no commits"))
        return findings

    tag = select_release_tag(snapshot.head_tags)
    if tag is None:
        findings.append(failed(Category.GIT, "HEAD has no semver tag (expected vX.Y.Z)"))
    else:
        findings.append(
            passed(Category.GIT, f"HEAD is tagged: {tag} (version {tag_version(tag)})")
        )
    return findings
