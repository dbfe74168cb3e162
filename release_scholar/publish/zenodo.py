# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Zenodo deposit publishing.

Consumes a built release bundle (archive + metadata.json) and turns it into a
Zenodo deposition:

  1. create an empty deposition
  2. upload the archive into its file bucket
  3. set the metadata from metadata.json
  4. publish, only when explicitly confirmed

Without confirmation the deposition stays a draft that can be reviewed and
deleted on the website. Publishing mints a DOI and cannot be undone.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from release_scholar.config.loader import config_home
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.exceptions import IoError, RemoteServiceError
from release_scholar.git.repository import GitRepository
from release_scholar.logging.logger import get_logger
from release_scholar.release.archive import ARCHIVE_SUFFIX
from release_scholar.release.builder import METADATA_FILE, resolve_release_tag
from release_scholar.utils.filesystem import atomic_write
from release_scholar.utils.http import request_json

_logger: logging.Logger = get_logger(__name__)

ZENODO_API = "https://zenodo.org/api"
ZENODO_SANDBOX_API = "https://sandbox.zenodo.org/api"
ZENODO_WEB = "https://zenodo.org"
ZENODO_SANDBOX_WEB = "https://sandbox.zenodo.org"

TOKEN_ENV = "ZENODO_TOKEN"
SANDBOX_TOKEN_ENV = "ZENODO_SANDBOX_TOKEN"
TOKEN_FILE = "token"
SANDBOX_TOKEN_FILE = "sandbox-token"


@dataclass(frozen=True)
class DepositResult:
    deposition_id: int
    doi: Optional[str]
    url: str
    published: bool


def load_token(sandbox: bool) -> str:
    """
    Zenodo API token from the environment or the config directory.

    Raises:
        IoError: No token found, or the token file can't be read.
    """
    env_var = SANDBOX_TOKEN_ENV if sandbox else TOKEN_ENV
    token = os.environ.get(env_var, "").strip()
    if token:
        return token

    token_path = config_home() / (SANDBOX_TOKEN_FILE if sandbox else TOKEN_FILE)
    if token_path.is_file():
        try:
            token = token_path.read_text(encoding="utf-8").strip()
        except OSError as err:
            raise IoError(f"Cannot read token from {token_path}: {err}") from err
        if token:
            return token

    raise IoError(f"No Zenodo token found. Set {env_var} or save it to {token_path}")


class ZenodoClient:
    """Thin client for the four deposition calls release-scholar needs."""

    def __init__(self, token: str, sandbox: bool = False) -> None:
        self.sandbox = sandbox
        self.base_url = ZENODO_SANDBOX_API if sandbox else ZENODO_API
        self.web_url = ZENODO_SANDBOX_WEB if sandbox else ZENODO_WEB
        self._headers = {"Authorization": f"Bearer {token}"}

    def create_deposition(self) -> dict[str, Any]:
        return request_json("POST", f"{self.base_url}/deposit/depositions", self._headers, payload={})

    def upload_file(self, bucket_url: str, file_path: Path, filename: str) -> dict[str, Any]:
        try:
            data = file_path.read_bytes()
        except OSError as err:
            raise IoError(f"Cannot read {file_path}: {err}") from err
        return request_json(
            "PUT",
            f"{bucket_url}/{quote(filename)}",
            self._headers,
            data=data,
            content_type="application/octet-stream",
        )

    def update_metadata(self, deposition_id: int, document: dict[str, Any]) -> dict[str, Any]:
        return request_json(
            "PUT",
            f"{self.base_url}/deposit/depositions/{deposition_id}",
            self._headers,
            payload=document,
        )

    def publish(self, deposition_id: int) -> dict[str, Any]:
        return request_json(
            "POST",
            f"{self.base_url}/deposit/depositions/{deposition_id}/actions/publish",
            self._headers,
        )

    def deposit_page(self, deposition_id: int) -> str:
        return f"{self.web_url}/deposit/{deposition_id}"


def find_archive(bundle_dir: Path) -> Path:
    """
    The single source archive in a bundle directory.

    Raises:
        IoError: The bundle doesn't exist or holds no archive.
    """
    if not bundle_dir.is_dir():
        raise IoError(
            f"Release bundle not found at {bundle_dir}. Run `release-scholar build` first."
        )
    archives = sorted(path for path in bundle_dir.iterdir() if path.name.endswith(ARCHIVE_SUFFIX))
    if not archives:
        raise IoError(f"No {ARCHIVE_SUFFIX} archive found in {bundle_dir}")
    return archives[0]


def _load_metadata_document(bundle_dir: Path) -> dict[str, Any]:
    path = bundle_dir / METADATA_FILE
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as err:
        raise IoError(f"Cannot load {path}: {err}") from err


def publish_release(
    project_dir: Path,
    config: ReleaseScholarConfig,
    client: ZenodoClient,
    confirm: bool = False,
    tag: Optional[str] = None,
) -> DepositResult:
    """
    Upload the bundle for `tag` (default: the release tag at HEAD).

    The deposition is published only when `confirm` is True; otherwise it is
    left as a draft and the result carries no DOI.

    Raises:
        RepositoryError: No release tag to publish.
        IoError: The bundle is missing or incomplete.
        RemoteServiceError: Zenodo rejected a request.
    """
    repo = GitRepository.open(project_dir)
    release_tag = resolve_release_tag(repo, tag)
    bundle_dir = repo.root / config.archive_dir / release_tag
    archive_path = find_archive(bundle_dir)
    document = _load_metadata_document(bundle_dir)

    _logger.info(
        "Publishing release",
        extra={"tag": release_tag, "sandbox": client.sandbox, "confirm": confirm},
    )

    deposition = client.create_deposition()
    deposition_id = int(deposition["id"])
    bucket_url = (deposition.get("links") or {}).get("bucket")
    if not bucket_url:
        raise RemoteServiceError("No bucket URL in deposition response")
    _logger.info("Deposition created", extra={"deposition_id": deposition_id})

    uploaded = client.upload_file(bucket_url, archive_path, archive_path.name) or {}
    _logger.info(
        "Archive uploaded",
        extra={
            "file": archive_path.name,
            "size": uploaded.get("size"),
            "checksum": uploaded.get("checksum"),
        },
    )

    client.update_metadata(deposition_id, document)
    _logger.info("Metadata set", extra={"deposition_id": deposition_id})

    if not confirm:
        return DepositResult(
            deposition_id=deposition_id,
            doi=None,
            url=client.deposit_page(deposition_id),
            published=False,
        )

    published = client.publish(deposition_id) or {}
    doi = published.get("doi")
    doi_url = published.get("doi_url") or (f"https://doi.org/{doi}" if doi else None)
    _logger.info("Deposition published", extra={"deposition_id": deposition_id, "doi": doi})
    return DepositResult(
        deposition_id=deposition_id,
        doi=doi,
        url=doi_url or client.deposit_page(deposition_id),
        published=True,
    )


def add_doi_badge(readme_path: Path, doi: str, doi_url: str) -> bool:
    """
    Insert a DOI badge after the README's first heading.

    Returns False without touching the file when it doesn't exist or already
    has a Zenodo DOI badge.
    """
    if not readme_path.is_file():
        return False
    content = readme_path.read_text(encoding="utf-8")
    if "doi.org" in content and "zenodo" in content:
        return False

    badge = f"[![DOI](https://zenodo.org/badge/DOI/{doi}.svg)]({doi_url})"
    first_line, newline, rest = content.partition("\n")
    if newline and first_line.startswith("#"):
        updated = f"{first_line}\n\n{badge}\n{rest}"
    else:
        updated = f"{badge}\n\n{content}"

    atomic_write(readme_path, updated)
    _logger.info("DOI badge added", extra={"path": str(readme_path), "doi": doi})
    return True
