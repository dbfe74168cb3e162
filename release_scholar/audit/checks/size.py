# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Size category: repository weight and things that shouldn't be in it.

Thresholds come from config.size and are decimal bytes (1 MB = 1,000,000).
Reaching a threshold counts as exceeding it.
"""

from pathlib import PurePosixPath
from typing import Optional

from release_scholar.audit.ecosystems import VENDORED_DIRECTORIES
from release_scholar.audit.models import Category, Finding, failed, passed, warned
from release_scholar.audit.secrets import is_binary
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.git.snapshot import ProjectSnapshot

# Binary content that belongs in a source release (docs, web assets).
ALLOWED_BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".bmp",
        ".ico",
        ".webp",
        ".tif",
        ".tiff",
        ".pdf",
        ".woff",
        ".woff2",
        ".ttf",
        ".otf",
        ".eot",
    }
)

_MB = 1_000_000


def _mb(size: int) -> str:
    return f"{size / _MB:.1f} MB"


def _vendored_root(path: str) -> Optional[str]:
    """The outermost vendored directory containing `path`, e.g. `web/node_modules`."""
    parts = PurePosixPath(path).parts[:-1]
    for index, part in enumerate(parts):
        if part in VENDORED_DIRECTORIES:
            return "/".join(parts[: index + 1])
    return None


def _total(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> Finding:
    total = snapshot.total_size
    summary = f"Tracked files total {_mb(total)} ({len(snapshot.files)} files)"
    if total >= config.size.total_fail_bytes:
        return failed(Category.SIZE, f"{summary}, too large for a source release")
    if total >= config.size.total_warn_bytes:
        return warned(Category.SIZE, f"{summary}, consider reducing")
    return passed(Category.SIZE, summary)


def _large_files(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    findings: list[Finding] = []
    for tracked in snapshot.files:
        if tracked.size >= config.size.file_fail_bytes:
            findings.append(
                failed(
                    Category.SIZE,
                    f"{tracked.path} is {_mb(tracked.size)}, consider removing it or using Git LFS",
                    path=tracked.path,
                )
            )
        elif tracked.size >= config.size.file_warn_bytes:
            findings.append(
                warned(Category.SIZE, f"{tracked.path} is {_mb(tracked.size)}", path=tracked.path)
            )
    if not findings:
        findings.append(
            passed(Category.SIZE, f"No large files detected (>= {_mb(config.size.file_warn_bytes)})")
        )
    return findings


def _unexpected_binaries(snapshot: ProjectSnapshot) -> list[Finding]:
    findings: list[Finding] = []
    for tracked in snapshot.files:
        if tracked.symlink or _vendored_root(tracked.path) is not None:
            continue
        if PurePosixPath(tracked.path).suffix.lower() in ALLOWED_BINARY_EXTENSIONS:
            continue
        if is_binary(tracked.content):
            findings.append(
                warned(
                    Category.SIZE,
                    f"Binary file tracked: {tracked.path} ({_mb(tracked.size)}), "
                    "consider .gitignore or Git LFS",
                    path=tracked.path,
                )
            )
    return findings


def _vendored_directories(snapshot: ProjectSnapshot) -> list[Finding]:
    roots: list[str] = []
    seen: set[str] = set()
    for path in snapshot.paths:
        root = _vendored_root(path)
        if root is not None and root not in seen:
            seen.add(root)
            roots.append(root)
    return [
        warned(Category.SIZE, f"Vendored dependency directory tracked: {root}/", path=root)
        for root in roots
    ]


def check_size(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    findings = [_total(snapshot, config)]
    findings.extend(_large_files(snapshot, config))
    findings.extend(_unexpected_binaries(snapshot))
    findings.extend(_vendored_directories(snapshot))
    return findings
