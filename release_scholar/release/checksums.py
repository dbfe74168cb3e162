# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Checksum file for a release bundle.

checksums.txt format, one line per archived file:
    SHA256 <sha256hex>  <filename>

The algorithm name leads each line so the file is self-describing when it is
copied somewhere without the rest of the bundle. Today a bundle lists exactly
one file, the source archive.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from release_scholar.logging.logger import get_logger
from release_scholar.utils.filesystem import atomic_write
from release_scholar.utils.hashing import HASH_ALGORITHM, compute_sha256

_logger: logging.Logger = get_logger(__name__)

CHECKSUM_FILE = "checksums.txt"
ALGORITHM_LABEL = HASH_ALGORITHM.upper()


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of re-hashing the files listed in checksums.txt."""

    is_valid: bool
    checked_count: int
    mismatches: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def format_checksum_line(sha256_hex: str, filename: str) -> str:
    return f"{ALGORITHM_LABEL} {sha256_hex}  {filename}"


def write_checksum_file(bundle_dir: Path, checksums: dict[str, str]) -> Path:
    """
    Write checksums.txt into `bundle_dir`, lines sorted by filename.

    Args:
        bundle_dir: Directory to write into.
        checksums: {filename: sha256_hex}.

    Returns:
        Path to the written file.
    """
    checksum_path = bundle_dir / CHECKSUM_FILE
    lines = [format_checksum_line(checksums[name], name) for name in sorted(checksums)]
    atomic_write(checksum_path, "\n".join(lines) + "\n")
    _logger.debug("Checksum file written", extra={"path": str(checksum_path), "entries": len(lines)})
    return checksum_path


def parse_checksum_file(checksum_path: Path) -> dict[str, str]:
    """
    Parse checksums.txt into {filename: sha256_hex}.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: On a malformed line or an algorithm other than SHA256.
    """
    if not checksum_path.is_file():
        raise FileNotFoundError(f"Checksum file not found: {checksum_path}")

    checksums: dict[str, str] = {}
    content = checksum_path.read_text(encoding="utf-8")

    for line_num, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        algorithm, _, rest = line.partition(" ")
        parts = rest.split("  ", maxsplit=1)
        if not rest or len(parts) != 2:
            raise ValueError(
                f"Invalid checksum format at line {line_num}: expected "
                f"'{ALGORITHM_LABEL} <hex>  <filename>', got: {line!r}"
            )
        if algorithm != ALGORITHM_LABEL:
            raise ValueError(f"Unsupported checksum algorithm at line {line_num}: {algorithm}")
        sha256_hex, filename = parts
        if len(sha256_hex) != 64:
            raise ValueError(
                f"Invalid SHA256 hash length at line {line_num}: "
                f"expected 64 chars, got {len(sha256_hex)}"
            )
        checksums[filename] = sha256_hex.lower()

    return checksums


def verify_bundle(bundle_dir: Path) -> VerificationResult:
    """
    Re-hash every file listed in `bundle_dir`/checksums.txt.

    Reports every mismatch and missing file, not just the first.
    """
    checksum_path = bundle_dir / CHECKSUM_FILE
    if not checksum_path.is_file():
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"{CHECKSUM_FILE} not found in {bundle_dir}"],
        )

    try:
        expected = parse_checksum_file(checksum_path)
    except ValueError as err:
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"Failed to parse {CHECKSUM_FILE}: {err}"],
        )

    mismatches: list[str] = []
    missing_files: list[str] = []
    checked = 0

    for filename, expected_hash in sorted(expected.items()):
        file_path = bundle_dir / filename
        if not file_path.is_file():
            missing_files.append(filename)
            _logger.error("File missing during verification", extra={"file": filename})
            continue

        actual_hash = compute_sha256(file_path)
        checked += 1
        if actual_hash != expected_hash:
            mismatches.append(filename)
            _logger.error(
                "Checksum mismatch",
                extra={
                    "file": filename,
                    "expected": expected_hash[:16] + "...",
                    "actual": actual_hash[:16] + "...",
                },
            )

    is_valid = not mismatches and not missing_files and checked > 0
    errors = [] if expected else [f"{CHECKSUM_FILE} lists no files"]

    if is_valid:
        _logger.info("All checksums verified", extra={"checked_count": checked})
    else:
        _logger.error(
            "Checksum verification failed",
            extra={"mismatches": len(mismatches), "missing": len(missing_files)},
        )

    return VerificationResult(
        is_valid=is_valid,
        checked_count=checked,
        mismatches=mismatches,
        missing_files=missing_files,
        errors=errors,
    )
