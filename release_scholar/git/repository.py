# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Thin wrapper around the `git` executable.

Everything release-scholar knows about a repository comes through here, via
plumbing commands with NUL-delimited output so odd file names survive. We
never run hooks, builds, or anything else from the repository.
"""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import IO, Optional

from release_scholar.exceptions import RepositoryError

GIT_TIMEOUT_SECONDS = 300

MODE_EXECUTABLE = "100755"
MODE_SYMLINK = "120000"
MODE_GITLINK = "160000"


def decode_path(raw: bytes) -> str:
    """Paths are bytes in git; keep undecodable bytes round-trippable."""
    return raw.decode("utf-8", "surrogateescape")


def path_sort_key(path: str) -> bytes:
    """Lexicographic byte order over paths, independent of locale."""
    return path.encode("utf-8", "surrogateescape")


@dataclass(frozen=True)
class IndexEntry:
    """One staged path from `git ls-files -s`."""

    mode: str
    oid: str
    path: str


@dataclass(frozen=True)
class TreeEntry:
    """One entry from a recursive `git ls-tree`."""

    mode: str
    kind: str
    oid: str
    path: str


def _git_env() -> dict[str, str]:
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    env["LC_ALL"] = "C"
    return env


class GitRepository:
    """A git working tree rooted at `root`."""

    def __init__(self, root: Path) -> None:
        self.root = root

    @classmethod
    def open(cls, path: Path) -> "GitRepository":
        """
        Open the working tree containing `path`.

        Raises:
            RepositoryError: If `path` is not inside a git working tree or git
                is not installed.
        """
        if not path.is_dir():
            raise RepositoryError(f"Project directory not found: {path}")
        probe = cls(path.resolve())
        try:
            output = probe.run("rev-parse", "--show-toplevel")
        except RepositoryError as err:
            raise RepositoryError(f"Not a git repository: {path} ({err})") from err
        return cls(Path(decode_path(output.strip())))

    def run(self, *args: str, input_data: Optional[bytes] = None, check: bool = True) -> bytes:
        """
        Run a git sub-command in this repository and return raw stdout.

        Raises:
            RepositoryError: git is missing, timed out, or (with check=True)
                exited non-zero.
        """
        try:
            result = subprocess.run(
                ["git", "-C", str(self.root), *args],
                input=input_data,
                capture_output=True,
                timeout=GIT_TIMEOUT_SECONDS,
                env=_git_env(),
                check=False,
            )
        except FileNotFoundError as err:
            raise RepositoryError("git executable not found on PATH") from err
        except subprocess.TimeoutExpired as err:
            raise RepositoryError(
                f"git {args[0]} timed out after {GIT_TIMEOUT_SECONDS} seconds"
            ) from err

        if check and result.returncode != 0:
            stderr = result.stderr.decode("utf-8", "replace").strip()
            raise RepositoryError(f"git {' '.join(args)} failed: {stderr}")
        return result.stdout

    def head_commit(self) -> Optional[str]:
        """The commit id HEAD points at, or None for a repository with no commits."""
        output = self.run("rev-parse", "--verify", "--quiet", "HEAD^{commit}", check=False)
        commit = output.decode("ascii", "replace").strip()
        return commit or None

    def resolve_commit(self, rev: str) -> str:
        """
        Resolve a revision (tag, branch, id) to a commit id.

        Raises:
            RepositoryError: If the revision doesn't name a commit.
        """
        output = self.run("rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}", check=False)
        commit = output.decode("ascii", "replace").strip()
        if not commit:
            raise RepositoryError(f"Cannot resolve {rev!r} to a commit")
        return commit

    def tags_at(self, commit: str) -> list[str]:
        """Names of all tags (lightweight or annotated) that point at `commit`."""
        output = self.run("tag", "--points-at", commit)
        return sorted(line for line in output.decode("utf-8", "replace").splitlines() if line)

    def status_paths(self) -> list[str]:
        """
        Paths with uncommitted changes, including untracked files.

        Ignored files are not reported.
        """
        output = self.run("status", "--porcelain", "-z", "--untracked-files=all")
        tokens = output.split(b"\0")
        paths: list[str] = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1
            if len(token) < 4:
                continue
            paths.append(decode_path(token[3:]))
            # Renames and copies carry the original path as an extra token.
            if token[:1] in (b"R", b"C"):
                index += 1
        return paths

    def index_entries(self) -> list[IndexEntry]:
        """Every path in the index, one entry per path."""
        output = self.run("ls-files", "--stage", "-z")
        entries: dict[str, IndexEntry] = {}
        for record in output.split(b"\0"):
            if not record:
                continue
            meta, _, raw_path = record.partition(b"\t")
            mode, oid, _stage = meta.decode("ascii").split(" ")
            path = decode_path(raw_path)
            # Conflicted paths appear once per stage; keep the first.
            entries.setdefault(path, IndexEntry(mode=mode, oid=oid, path=path))
        return list(entries.values())

    def tree_entries(self, rev: str) -> list[TreeEntry]:
        """Every blob and gitlink in the tree of `rev`, recursively."""
        output = self.run("ls-tree", "-r", "-z", "--full-tree", rev)
        entries: list[TreeEntry] = []
        for record in output.split(b"\0"):
            if not record:
                continue
            meta, _, raw_path = record.partition(b"\t")
            mode, kind, oid = meta.decode("ascii").split(" ")
            entries.append(TreeEntry(mode=mode, kind=kind, oid=oid, path=decode_path(raw_path)))
        return entries


class BlobReader:
    """
    Streams object contents through one long-lived `git cat-file --batch`.

    Use it as a context manager so the child process is always reaped, even
    when the caller stops iterating early or raises.
    """

    def __init__(self, repo: GitRepository) -> None:
        self._repo = repo
        self._process: Optional[subprocess.Popen[bytes]] = None

    def __enter__(self) -> "BlobReader":
        try:
            self._process = subprocess.Popen(
                ["git", "-C", str(self._repo.root), "cat-file", "--batch"],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                env=_git_env(),
            )
        except FileNotFoundError as err:
            raise RepositoryError("git executable not found on PATH") from err
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._process is None:
            return
        process = self._process
        self._process = None
        if process.stdin is not None:
            process.stdin.close()
        if process.stdout is not None:
            process.stdout.close()
        try:
            process.wait(timeout=GIT_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def read(self, oid: str) -> bytes:
        """
        Return the raw content of object `oid`.

        Raises:
            RepositoryError: The object is missing or the reader is closed.
        """
        if self._process is None or self._process.stdin is None or self._process.stdout is None:
            raise RepositoryError("BlobReader is not open")
        stdin: IO[bytes] = self._process.stdin
        stdout: IO[bytes] = self._process.stdout

        stdin.write(oid.encode("ascii") + b"\n")
        stdin.flush()

        header = stdout.readline().decode("ascii", "replace").strip()
        parts = header.split(" ")
        if len(parts) != 3:
            raise RepositoryError(f"Cannot read object {oid}: {header or 'no response'}")
        size = int(parts[2])
        content = stdout.read(size)
        stdout.read(1)  # trailing LF after every object
        return content
