# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Language ecosystem detection from a list of tracked paths.

An ecosystem counts as present if any of its marker files is tracked (at any
depth), or if at least MIN_SOURCE_FILES files carry one of its source
extensions. Paths inside vendored dependency directories are ignored so a
checked-in node_modules doesn't turn a Python project into a Node one.

Pure functions, no I/O.
"""

from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable

MIN_SOURCE_FILES = 3

# Directory names that hold somebody else's code.
VENDORED_DIRECTORIES: frozenset[str] = frozenset(
    {
        "node_modules",
        "bower_components",
        "vendor",
        "third_party",
        "third-party",
        "site-packages",
        ".venv",
        "venv",
    }
)


class Ecosystem(str, Enum):
    PYTHON = "python"
    RUST = "rust"
    NODE = "node"
    JAVA = "java"


_MARKER_FILES: dict[Ecosystem, frozenset[str]] = {
    Ecosystem.PYTHON: frozenset({"pyproject.toml", "setup.py", "setup.cfg", "requirements.txt"}),
    Ecosystem.RUST: frozenset({"Cargo.toml"}),
    Ecosystem.NODE: frozenset({"package.json"}),
    Ecosystem.JAVA: frozenset({"pom.xml", "build.gradle", "build.gradle.kts"}),
}

_SOURCE_EXTENSIONS: dict[Ecosystem, frozenset[str]] = {
    Ecosystem.PYTHON: frozenset({".py"}),
    Ecosystem.RUST: frozenset({".rs"}),
    Ecosystem.NODE: frozenset({".js", ".mjs", ".cjs", ".ts"}),
    Ecosystem.JAVA: frozenset({".java"}),
}

# Conventional .gitignore entries for each ecosystem's build output.
ARTIFACT_PATTERNS: dict[Ecosystem, tuple[tuple[str, str], ...]] = {
    Ecosystem.PYTHON: (
        ("__pycache__/", "Python bytecode cache"),
        ("*.pyc", "Python compiled files"),
        ("*.egg-info", "Python package metadata"),
        ("dist/", "Python distribution output"),
    ),
    Ecosystem.RUST: (("target/", "Rust/Cargo build output"),),
    Ecosystem.NODE: (("node_modules/", "Node.js dependencies"),),
    Ecosystem.JAVA: (
        ("target/", "Java/Maven build output"),
        ("*.class", "Java compiled classes"),
    ),
}


def is_vendored(path: str) -> bool:
    """True if any directory component of `path` is a vendored-dependency directory."""
    return any(part in VENDORED_DIRECTORIES for part in PurePosixPath(path).parts[:-1])


def detect_ecosystems(paths: Iterable[str]) -> frozenset[Ecosystem]:
    """Return the set of ecosystems present in `paths`; empty if none."""
    found: set[Ecosystem] = set()
    source_counts: dict[Ecosystem, int] = {ecosystem: 0 for ecosystem in Ecosystem}

    for path in paths:
        if is_vendored(path):
            continue
        pure = PurePosixPath(path)
        for ecosystem in Ecosystem:
            if pure.name in _MARKER_FILES[ecosystem]:
                found.add(ecosystem)
            elif pure.suffix.lower() in _SOURCE_EXTENSIONS[ecosystem]:
                source_counts[ecosystem] += 1

    for ecosystem, count in source_counts.items():
        if count >= MIN_SOURCE_FILES:
            found.add(ecosystem)

    return frozenset(found)
