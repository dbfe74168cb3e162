# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Security category.

Four passes, in this order:
  1. Secret scan of the working tree (with line numbers)
  2. Secret scan of every blob in history (fail-severity rules only)
  3. Sensitive file names among tracked paths
  4. Security entries in .gitignore

Passes 1 and 2 share one SecretScanner, so a secret that is both committed
and still present is reported once, from the working tree.
"""

import logging
from pathlib import PurePosixPath
from typing import Optional

from release_scholar.audit.models import Category, Finding, passed, warned
from release_scholar.audit.secrets import SecretScanner
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.git.history import HistoryWalker
from release_scholar.git.repository import GitRepository
from release_scholar.git.snapshot import ProjectSnapshot
from release_scholar.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)

GITIGNORE_FILE = ".gitignore"

# Matched against the file name: equal to, or ending with, the pattern.
SENSITIVE_FILE_PATTERNS: tuple[str, ...] = (
    ".env",
    ".pem",
    ".key",
    "id_rsa",
    "id_dsa",
    "id_ed25519",
    "credentials.json",
    ".sqlite",
    ".DS_Store",
    ".p12",
    ".pfx",
)

GITIGNORE_SECURITY_PATTERNS: tuple[str, ...] = (".env", ".DS_Store", "*.pem", "*.key", "id_rsa")


def gitignore_contains(content: str, pattern: str) -> bool:
    """
    True if a non-comment line of .gitignore covers `pattern`.

    Matching is textual: the exact pattern, the pattern without its trailing
    slash, or either anchored with a leading slash.
    """
    bare = pattern.rstrip("/")
    accepted = {pattern, bare, "/" + pattern, "/" + bare}
    for line in content.splitlines():
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        if entry in accepted:
            return True
    return False


def read_gitignore(snapshot: ProjectSnapshot) -> Optional[str]:
    """Text of the tracked top-level .gitignore, or None if it isn't tracked."""
    tracked = snapshot.get(GITIGNORE_FILE)
    if tracked is None:
        return None
    return tracked.content.decode("utf-8", errors="replace")


def _scan_secrets(snapshot: ProjectSnapshot) -> list[Finding]:
    scanner = SecretScanner()

    tree_findings: list[Finding] = []
    for tracked in snapshot.files:
        if tracked.symlink:
            continue
        tree_findings.extend(scanner.scan_file(tracked.path, tracked.content))

    history_findings: list[Finding] = []
    history_blobs = 0
    if snapshot.commit is not None:
        walker = HistoryWalker(GitRepository.open(snapshot.root))
        for blob in walker:
            history_blobs += 1
            history_findings.extend(scanner.scan_blob(blob.path, blob.content))

    _logger.info(
        "Secret scan finished",
        extra={
            "files_scanned": scanner.scanned,
            "binary_skipped": scanner.skipped_binary,
            "history_blobs": history_blobs,
            "findings": scanner.reported_count,
        },
    )

    if not tree_findings:
        tree_findings.append(passed(Category.SECURITY, "No secrets detected in tracked files"))
    if not history_findings:
        history_findings.append(
            passed(
                Category.SECURITY,
                f"No additional secrets found in git history ({history_blobs} blobs scanned)",
            )
        )
    return tree_findings + history_findings


def _sensitive_files(snapshot: ProjectSnapshot) -> list[Finding]:
    findings: list[Finding] = []
    for path in snapshot.paths:
        name = PurePosixPath(path).name
        if any(name == pattern or name.endswith(pattern) for pattern in SENSITIVE_FILE_PATTERNS):
            findings.append(warned(Category.SECURITY, f"Sensitive file tracked: {path}", path=path))
    if not findings:
        findings.append(passed(Category.SECURITY, "No sensitive files tracked"))
    return findings


def _gitignore_security(snapshot: ProjectSnapshot) -> list[Finding]:
    content = read_gitignore(snapshot)
    if content is None:
        return [warned(Category.SECURITY, f"{GITIGNORE_FILE} not found", path=GITIGNORE_FILE)]

    missing = [p for p in GITIGNORE_SECURITY_PATTERNS if not gitignore_contains(content, p)]
    if missing:
        return [
            warned(
                Category.SECURITY,
                f"{GITIGNORE_FILE} is missing security patterns: {', '.join(missing)}",
                path=GITIGNORE_FILE,
            )
        ]
    return [passed(Category.SECURITY, f"{GITIGNORE_FILE} covers common sensitive file patterns")]


def check_security(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    findings = _scan_secrets(snapshot)
    findings.extend(_sensitive_files(snapshot))
    findings.extend(_gitignore_security(snapshot))
    return findings
