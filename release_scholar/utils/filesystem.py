# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations.

Writes that produce release artifacts must be atomic: readers either see the
previous file or the complete new one, never a partial write.

Atomic writes work by writing to a temporary file in the same directory as
the target, then renaming. Rename on the same filesystem is atomic on POSIX.
Directory-level staging for whole bundles lives in release.builder and uses
the same rename trick one level up.
"""

import shutil
import tempfile
from pathlib import Path

TEMP_PREFIX = ".release_scholar_tmp_"


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to a file atomically.

    The temp file lives next to the target so the final rename never crosses
    a filesystem boundary. If anything fails, the temp file is removed and the
    target is left untouched.

    Raises:
        OSError: If the write or rename fails.
    """
    atomic_write_bytes(target_path, content.encode(encoding))


def atomic_write_bytes(target_path: Path, data: bytes) -> None:
    """
    Write binary data to a file atomically. Same approach as atomic_write.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False: the file has to survive close() so it can be renamed.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="wb",
        dir=str(target_path.parent),
        prefix=TEMP_PREFIX,
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(data)
        temp_fd.flush()
        temp_fd.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def make_staging_dir(parent: Path, label: str) -> Path:
    """
    Create an empty, uniquely named staging directory inside `parent`.

    `parent` itself must already exist; the caller owns cleanup.
    """
    return Path(tempfile.mkdtemp(prefix=f"{TEMP_PREFIX}{label}_", dir=str(parent)))


def remove_tree(path: Path) -> bool:
    """
    Delete a directory tree if it exists. Returns whether anything was removed.

    Never throws on a missing directory.
    """
    if path.exists():
        shutil.rmtree(path)
        return True
    return False
