# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Deterministic source archive (`<name>-<tag>.tar.gz`).

The archive bytes depend only on tracked paths and their content. Everything
else a tar or gzip writer would normally pick up from the environment is
pinned:

  - entry order: lexicographic byte order of paths, never directory order
  - mode: 0755 if the tracked executable bit is set, else 0644
  - mtime: ARCHIVE_MTIME for every entry
  - owner: uid/gid 0, uname/gname "root"
  - tar flavour: GNU, so long paths are encoded the same way everywhere
  - gzip header: mtime 0, no embedded file name, fixed compression level

Symlinks are stored as symlink entries pointing at their tracked target;
nothing is dereferenced.
"""

import gzip
import io
import logging
import tarfile
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from release_scholar.git.repository import path_sort_key
from release_scholar.git.snapshot import ProjectSnapshot, TrackedFile
from release_scholar.logging.logger import get_logger
from release_scholar.utils.hashing import compute_sha256_bytes

_logger: logging.Logger = get_logger(__name__)

# 1980-01-01T00:00:00Z, the earliest timestamp zip and most tools accept.
ARCHIVE_MTIME = 315532800
ARCHIVE_SUFFIX = ".tar.gz"
COMPRESS_LEVEL = 9

MODE_REGULAR = 0o644
MODE_EXECUTABLE = 0o755
MODE_SYMLINK = 0o777


@dataclass(frozen=True)
class ArchiveManifest:
    """Every archived path with its content hash, plus the archive's own hash."""

    entries: tuple[tuple[str, str], ...]
    archive_sha256: str

    @property
    def file_count(self) -> int:
        return len(self.entries)


def archive_name(project_name: str, tag: str) -> str:
    return f"{project_name}-{tag}{ARCHIVE_SUFFIX}"


def archive_prefix(project_name: str, tag: str) -> str:
    """Top-level directory inside the archive, e.g. `mytool-v1.2.0`."""
    return f"{project_name}-{tag}"


def ordered_files(files: Iterable[TrackedFile]) -> list[TrackedFile]:
    return sorted(files, key=lambda item: path_sort_key(item.path))


def _tar_info(tracked: TrackedFile, prefix: str) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=f"{prefix}/{tracked.path}")
    info.mtime = ARCHIVE_MTIME
    info.uid = 0
    info.gid = 0
    info.uname = "root"
    info.gname = "root"
    if tracked.symlink:
        info.type = tarfile.SYMTYPE
        info.linkname = tracked.content.decode("utf-8", "surrogateescape")
        info.mode = MODE_SYMLINK
        info.size = 0
    else:
        info.type = tarfile.REGTYPE
        info.mode = MODE_EXECUTABLE if tracked.executable else MODE_REGULAR
        info.size = tracked.size
    return info


def write_archive(files: Iterable[TrackedFile], prefix: str, fileobj: BinaryIO) -> None:
    """
    Write a gzip-compressed GNU tar of `files` under `prefix/` to `fileobj`.

    The caller owns `fileobj`; it is flushed but not closed.
    """
    entries = ordered_files(files)
    with gzip.GzipFile(
        filename="", mode="wb", fileobj=fileobj, compresslevel=COMPRESS_LEVEL, mtime=0
    ) as compressed:
        with tarfile.open(fileobj=compressed, mode="w", format=tarfile.GNU_FORMAT) as archive:
            for tracked in entries:
                info = _tar_info(tracked, prefix)
                if tracked.symlink:
                    archive.addfile(info)
                else:
                    archive.addfile(info, io.BytesIO(tracked.content))
    fileobj.flush()
    _logger.debug("Archive written", extra={"prefix": prefix, "entries": len(entries)})


def build_archive_bytes(files: Iterable[TrackedFile], prefix: str) -> bytes:
    """The complete archive in memory; convenient for hashing and tests."""
    buffer = io.BytesIO()
    write_archive(files, prefix, buffer)
    return buffer.getvalue()


def build_manifest(snapshot: ProjectSnapshot, archive_sha256: str) -> ArchiveManifest:
    entries = tuple(
        (tracked.path, compute_sha256_bytes(tracked.content))
        for tracked in ordered_files(snapshot.files)
    )
    return ArchiveManifest(entries=entries, archive_sha256=archive_sha256)
