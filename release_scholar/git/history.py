# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Full-history blob enumeration.

A secret committed once and deleted later is still in every clone, so the
security audit has to look at every blob ever reachable from HEAD, not just
the current tree.

How this works:
  1. `git rev-list --objects HEAD` walks the commit graph and lists every
     reachable object exactly once, with the path it was first seen under.
  2. `git cat-file --batch-check` tells us which of those objects are blobs.
  3. Blob contents are streamed lazily through `git cat-file --batch`, one at
     a time, as the caller iterates.

Identity is the blob id, so a file that never changed across a thousand
commits is read and scanned once.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from release_scholar.git.repository import BlobReader, GitRepository, decode_path
from release_scholar.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class HistoricalBlob:
    """One distinct blob from history and a path it was stored under."""

    oid: str
    path: str
    content: bytes


class HistoryWalker:
    """
    Restartable, finite sequence of every blob reachable from HEAD.

    Each call to iter() starts a fresh traversal, so the same walker can be
    consumed more than once. A repository without commits yields nothing.
    """

    def __init__(self, repo: GitRepository) -> None:
        self._repo = repo

    def _blob_index(self) -> list[tuple[str, str]]:
        """(oid, path) for every reachable blob, in rev-list order."""
        listing = self._repo.run("rev-list", "--objects", "HEAD")
        checked = self._repo.run(
            "cat-file",
            "--batch-check=%(objectname) %(objecttype) %(rest)",
            input_data=listing,
        )
        index: list[tuple[str, str]] = []
        seen: set[str] = set()
        for line in checked.split(b"\n"):
            if not line:
                continue
            oid_raw, _, remainder = line.partition(b" ")
            kind, _, raw_path = remainder.partition(b" ")
            if kind != b"blob" or not raw_path:
                continue
            oid = oid_raw.decode("ascii")
            if oid in seen:
                continue
            seen.add(oid)
            index.append((oid, decode_path(raw_path)))
        return index

    def __iter__(self) -> Iterator[HistoricalBlob]:
        if self._repo.head_commit() is None:
            return
        index = self._blob_index()
        _logger.debug(
            "History walk started",
            extra={"root": str(self._repo.root), "blobs": len(index)},
        )
        with BlobReader(self._repo) as reader:
            for oid, path in index:
                yield HistoricalBlob(oid=oid, path=path, content=reader.read(oid))
