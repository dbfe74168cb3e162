# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release bundle builder, the engine behind `release-scholar build`.

A bundle for tag vX.Y.Z lives in <archive_dir>/vX.Y.Z/:

    <archive_dir>/vX.Y.Z/
    ├─ <name>-vX.Y.Z.tar.gz   deterministic source archive
    ├─ checksums.txt          SHA256 of the archive
    ├─ metadata.json          publication metadata from CITATION.cff
    ├─ CITATION.cff           verbatim, as committed at the tag
    └─ codemeta.json          verbatim, only if tracked at the tag

Everything comes from the committed tree at the tag, never from the working
tree. The bundle is assembled in a staging directory next to its final
location and renamed into place only once every file is written, so a build
either produces a complete bundle or leaves <archive_dir> as it was.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from release_scholar.audit.checks.git_state import SEMVER_TAG, select_release_tag, tag_version
from release_scholar.config.loader import resolve_project_name
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.exceptions import IoError, ParseError, RepositoryError
from release_scholar.git.repository import GitRepository
from release_scholar.git.snapshot import snapshot_at_revision
from release_scholar.logging.logger import get_logger
from release_scholar.metadata.citation import CITATION_FILE, parse_citation_bytes
from release_scholar.metadata.zenodo import ReleaseMetadata
from release_scholar.release.archive import (
    ArchiveManifest,
    archive_name,
    archive_prefix,
    build_manifest,
    write_archive,
)
from release_scholar.release.checksums import write_checksum_file
from release_scholar.utils.filesystem import (
    TEMP_PREFIX,
    atomic_write,
    atomic_write_bytes,
    make_staging_dir,
    remove_tree,
)
from release_scholar.utils.hashing import compute_sha256

_logger: logging.Logger = get_logger(__name__)

METADATA_FILE = "metadata.json"
CODEMETA_FILE = "codemeta.json"


@dataclass(frozen=True)
class BuildResult:
    """What a successful build wrote."""

    tag: str
    version: str
    bundle_dir: Path
    archive_path: Path
    archive_sha256: str
    manifest: ArchiveManifest
    metadata: ReleaseMetadata
    replaced_existing: bool


def resolve_release_tag(repo: GitRepository, tag: Optional[str]) -> str:
    """
    The tag to build: `tag` if given, else the release tag at HEAD.

    Raises:
        RepositoryError: No usable tag, or `tag` isn't vMAJOR.MINOR.PATCH.
    """
    if tag is not None:
        if not SEMVER_TAG.match(tag):
            raise RepositoryError(f"Tag {tag!r} is not a release tag (expected vX.Y.Z)")
        return tag

    head = repo.head_commit()
    if head is None:
        raise RepositoryError("Repository has no commits")
    selected = select_release_tag(repo.tags_at(head))
    if selected is None:
        raise RepositoryError("HEAD has no semver tag (expected vX.Y.Z); pass --tag to choose one")
    return selected


def _swap_into_place(staging: Path, final: Path) -> bool:
    """
    Rename `staging` to `final`, replacing an existing bundle.

    The old bundle is moved aside first and restored if the rename fails.
    Returns whether an existing bundle was replaced.
    """
    if not final.exists():
        staging.rename(final)
        return False

    backup = final.with_name(f"{TEMP_PREFIX}{final.name}_previous")
    remove_tree(backup)
    final.rename(backup)
    try:
        staging.rename(final)
    except OSError:
        backup.rename(final)
        raise
    remove_tree(backup)
    return True


def build_release(
    project_dir: Path, config: ReleaseScholarConfig, tag: Optional[str] = None
) -> BuildResult:
    """
    Build the release bundle for `tag` (default: the release tag at HEAD).

    Raises:
        RepositoryError: Not a repository, or no usable tag.
        ParseError: CITATION.cff is missing at the tag or malformed.
        IoError: The bundle could not be written; nothing was left behind.
    """
    repo = GitRepository.open(project_dir)
    release_tag = resolve_release_tag(repo, tag)
    snapshot = snapshot_at_revision(repo.root, release_tag)

    citation = snapshot.get(CITATION_FILE)
    if citation is None:
        raise ParseError(f"{CITATION_FILE} is not tracked at {release_tag}")
    record = parse_citation_bytes(citation.content)
    metadata = ReleaseMetadata.from_citation(record, config)

    project_name = resolve_project_name(config, repo.root)
    name = archive_name(project_name, release_tag)
    archive_root = repo.root / config.archive_dir
    final_dir = archive_root / release_tag

    _logger.info(
        "Building release",
        extra={"tag": release_tag, "commit": snapshot.commit, "files": len(snapshot.files)},
    )

    created_root = not archive_root.exists()
    staging: Optional[Path] = None
    completed = False
    try:
        archive_root.mkdir(parents=True, exist_ok=True)
        staging = make_staging_dir(archive_root, release_tag)

        archive_path = staging / name
        with open(archive_path, "wb") as handle:
            write_archive(snapshot.files, archive_prefix(project_name, release_tag), handle)
        archive_sha256 = compute_sha256(archive_path)

        write_checksum_file(staging, {name: archive_sha256})
        atomic_write(staging / METADATA_FILE, metadata.to_json())
        atomic_write_bytes(staging / CITATION_FILE, citation.content)
        codemeta = snapshot.get(CODEMETA_FILE)
        if codemeta is not None:
            atomic_write_bytes(staging / CODEMETA_FILE, codemeta.content)

        replaced = _swap_into_place(staging, final_dir)
        completed = True
    except OSError as err:
        raise IoError(f"Cannot write release bundle to {final_dir}: {err}") from err
    finally:
        if not completed:
            if staging is not None:
                remove_tree(staging)
            if created_root and archive_root.is_dir() and not any(archive_root.iterdir()):
                archive_root.rmdir()

    result = BuildResult(
        tag=release_tag,
        version=tag_version(release_tag),
        bundle_dir=final_dir,
        archive_path=final_dir / name,
        archive_sha256=archive_sha256,
        manifest=build_manifest(snapshot, archive_sha256),
        metadata=metadata,
        replaced_existing=replaced,
    )
    _logger.info(
        "Release bundle written",
        extra={
            "bundle_dir": str(final_dir),
            "archive": name,
            "sha256": archive_sha256,
            "replaced_existing": replaced,
        },
    )
    return result
