# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared fixtures for audit tests.

Most category checks only look at a ProjectSnapshot, so these tests build
snapshots in memory instead of driving git. A snapshot without a commit also
keeps the security check from walking any history.
"""

from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional, Union

import pytest

from release_scholar.git.snapshot import ProjectSnapshot, TrackedFile

SnapshotFactory = Callable[..., ProjectSnapshot]


@pytest.fixture()
def make_snapshot(tmp_path: Path) -> SnapshotFactory:
    """Build a snapshot from {path: content}; str content is UTF-8 encoded."""

    def factory(
        files: Mapping[str, Union[str, bytes]],
        commit: Optional[str] = None,
        head_tags: Iterable[str] = (),
        dirty_paths: Iterable[str] = (),
    ) -> ProjectSnapshot:
        tracked = [
            TrackedFile(path, content.encode("utf-8") if isinstance(content, str) else content)
            for path, content in files.items()
        ]
        dirty = tuple(dirty_paths)
        return ProjectSnapshot.build(
            root=tmp_path,
            files=tracked,
            commit=commit,
            clean=not dirty,
            head_tags=head_tags,
            dirty_paths=dirty,
        )

    return factory
