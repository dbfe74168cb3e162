# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Immutable views of a project at one commit.

A ProjectSnapshot is built once at the start of `check` or `build`, handed to
every consumer, and dropped at the end of the command. Files are always held
in lexicographic byte order of their paths, so anything iterating a snapshot
sees the same order on every machine.

Two constructors exist because the two commands care about different trees:
  - snapshot_working_tree: tracked paths with their on-disk content. This is
    what `check` audits, because it is what is about to be tagged.
  - snapshot_at_revision: tracked paths with their committed content at a
    tag. This is what `build` packages, because only committed content is
    reproducible.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from release_scholar.git.repository import (
    MODE_EXECUTABLE,
    MODE_GITLINK,
    MODE_SYMLINK,
    BlobReader,
    GitRepository,
    path_sort_key,
)
from release_scholar.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class TrackedFile:
    """One tracked path and its content."""

    path: str
    content: bytes
    executable: bool = False
    symlink: bool = False

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    Tracked files at one commit plus the repository state the audit needs.

    `commit` is None for a repository without commits; `clean` is False when
    the working tree has uncommitted changes (listed in `dirty_paths`).
    """

    root: Path
    commit: Optional[str]
    files: tuple[TrackedFile, ...]
    clean: bool
    head_tags: tuple[str, ...] = ()
    dirty_paths: tuple[str, ...] = ()
    _by_path: dict[str, TrackedFile] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.files, key=lambda item: path_sort_key(item.path)))
        object.__setattr__(self, "files", ordered)
        object.__setattr__(self, "_by_path", {item.path: item for item in ordered})

    @classmethod
    def build(
        cls,
        root: Path,
        files: Iterable[TrackedFile],
        commit: Optional[str] = None,
        clean: bool = True,
        head_tags: Iterable[str] = (),
        dirty_paths: Iterable[str] = (),
    ) -> "ProjectSnapshot":
        """Create a snapshot from any iterable of files; order is canonicalized."""
        return cls(
            root=root,
            commit=commit,
            files=tuple(files),
            clean=clean,
            head_tags=tuple(sorted(head_tags)),
            dirty_paths=tuple(dirty_paths),
        )

    @classmethod
    def empty(cls, root: Path) -> "ProjectSnapshot":
        """Stand-in for a directory that could not be read as a repository."""
        return cls.build(root=root, files=(), clean=False)

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(item.path for item in self.files)

    @property
    def total_size(self) -> int:
        return sum(item.size for item in self.files)

    def get(self, path: str) -> Optional[TrackedFile]:
        return self._by_path.get(path)


def snapshot_working_tree(root: Path) -> ProjectSnapshot:
    """
    Snapshot the tracked files as they are on disk right now.

    Tracked paths deleted from the working tree are left out; they also make
    the snapshot dirty, so the Git audit reports them.

    Raises:
        RepositoryError: If `root` is not a git working tree.
    """
    repo = GitRepository.open(root)
    files: list[TrackedFile] = []

    for entry in repo.index_entries():
        if entry.mode == MODE_GITLINK:
            continue
        full_path = repo.root / entry.path
        if entry.mode == MODE_SYMLINK:
            if not full_path.is_symlink():
                continue
            content = os.fsencode(os.readlink(full_path))
        else:
            if not full_path.is_file():
                continue
            content = full_path.read_bytes()
        files.append(
            TrackedFile(
                path=entry.path,
                content=content,
                executable=entry.mode == MODE_EXECUTABLE,
                symlink=entry.mode == MODE_SYMLINK,
            )
        )

    commit = repo.head_commit()
    head_tags = repo.tags_at(commit) if commit is not None else []
    dirty = repo.status_paths()

    snapshot = ProjectSnapshot.build(
        root=repo.root,
        files=files,
        commit=commit,
        clean=not dirty,
        head_tags=head_tags,
        dirty_paths=dirty,
    )
    _logger.debug(
        "Working tree snapshot taken",
        extra={"root": str(repo.root), "files": len(snapshot.files), "clean": snapshot.clean},
    )
    return snapshot


def snapshot_at_revision(root: Path, rev: str) -> ProjectSnapshot:
    """
    Snapshot the committed tree of `rev` (usually a release tag).

    Content comes from the object database, never from the working tree, so
    local edits and untracked files cannot leak in.

    Raises:
        RepositoryError: If `root` is not a repository or `rev` is unknown.
    """
    repo = GitRepository.open(root)
    commit = repo.resolve_commit(rev)
    files: list[TrackedFile] = []

    with BlobReader(repo) as reader:
        for entry in repo.tree_entries(commit):
            if entry.kind != "blob":
                continue
            files.append(
                TrackedFile(
                    path=entry.path,
                    content=reader.read(entry.oid),
                    executable=entry.mode == MODE_EXECUTABLE,
                    symlink=entry.mode == MODE_SYMLINK,
                )
            )

    dirty = repo.status_paths()
    snapshot = ProjectSnapshot.build(
        root=repo.root,
        files=files,
        commit=commit,
        clean=not dirty,
        head_tags=repo.tags_at(commit),
        dirty_paths=dirty,
    )
    _logger.debug(
        "Revision snapshot taken",
        extra={"rev": rev, "commit": commit[:12], "files": len(snapshot.files)},
    )
    return snapshot
