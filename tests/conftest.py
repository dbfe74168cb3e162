# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for release-scholar tests.

Fixtures here are available to every test file automatically. We keep them
minimal: an isolated machine-level config directory, a helper that drives a
real `git` in a temp directory, and a project that passes every audit.
"""

import os
import shutil
import subprocess
import textwrap
from pathlib import Path
from typing import Optional

import pytest

from release_scholar.config.schema import ReleaseScholarConfig

# https://orcid.org/0000-0002-1825-0097 is ORCID's documented example iD.
VALID_ORCID = "https://orcid.org/0000-0002-1825-0097"


def citation_text(
    version: str = "0.1.0",
    orcid: Optional[str] = VALID_ORCID,
    title: str = "Example Tool",
) -> str:
    """A complete CITATION.cff document."""
    orcid_line = f"\n            orcid: {orcid}" if orcid else ""
    return textwrap.dedent(f"""\
        cff-version: 1.2.0
        message: If you use this software, please cite it.
        title: {title}
        version: "{version}"
        license: MIT
        date-released: 2024-01-31
        abstract: A tool that does one thing well.
        repository-code: https://codeberg.org/ada/example-tool
        keywords:
          - research software
          - reproducibility
        authors:
          - family-names: Lovelace
            given-names: Ada{orcid_line}
    """)


GITIGNORE_TEXT = ".env\n.DS_Store\n*.pem\n*.key\nid_rsa\nrelease/\n"


class GitRepo:
    """A throwaway git repository driven through the real `git` executable."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.org")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str) -> str:
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        result = subprocess.run(
            ["git", "-C", str(self.root), *args],
            capture_output=True,
            text=True,
            check=True,
            env=env,
        )
        return result.stdout

    def write(self, path: str, content: str | bytes) -> Path:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        return target

    def commit(self, message: str = "commit", add_all: bool = True) -> str:
        if add_all:
            self.git("add", "-A")
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.git("rev-parse", "HEAD").strip()

    def tag(self, name: str, annotated: bool = False) -> None:
        if annotated:
            self.git("tag", "-a", name, "-m", name)
        else:
            self.git("tag", name)


@pytest.fixture(autouse=True)
def config_home_dir(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the machine-level config at an empty temp dir for every test."""
    home = tmp_path_factory.mktemp("config-home")
    monkeypatch.setenv("RELEASE_SCHOLAR_CONFIG_HOME", str(home))
    monkeypatch.delenv("ZENODO_TOKEN", raising=False)
    monkeypatch.delenv("ZENODO_SANDBOX_TOKEN", raising=False)
    return home


@pytest.fixture()
def default_config() -> ReleaseScholarConfig:
    return ReleaseScholarConfig()


@pytest.fixture()
def make_citation():  # type: ignore[no-untyped-def]
    """Factory for CITATION.cff text; keyword arguments as in citation_text."""
    return citation_text


@pytest.fixture()
def valid_orcid() -> str:
    return VALID_ORCID


@pytest.fixture()
def git_repo(tmp_path: Path) -> GitRepo:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return GitRepo(tmp_path / "example-tool")


@pytest.fixture()
def release_ready_repo(git_repo: GitRepo) -> GitRepo:
    """A committed project tagged v0.1.0 that passes every audit category."""
    git_repo.write("LICENSE", "MIT License\n")
    git_repo.write("README.md", "# Example Tool\n\nDoes one thing well.\n")
    git_repo.write("CHANGELOG.md", "# Changelog\n\n## [0.1.0]\n")
    git_repo.write("CITATION.cff", citation_text())
    git_repo.write(".gitignore", GITIGNORE_TEXT)
    git_repo.write("src/main.txt", "hello\n")
    git_repo.commit("Initial release")
    git_repo.tag("v0.1.0")
    return git_repo


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
