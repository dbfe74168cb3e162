# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Push-mirror setup on a Forgejo forge (Codeberg by default).

The canonical repository lives on the forge; GitHub and GitLab copies are
kept in sync by the forge itself through push mirrors, syncing on every push
and every 8 hours. Credentials come from the `mirrors` config section, which
normally lives in the machine-level config.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from release_scholar.config.exceptions import ConfigValidationError
from release_scholar.config.schema import MirrorsConfig, ReleaseScholarConfig
from release_scholar.logging.logger import get_logger
from release_scholar.utils.http import request_json

_logger: logging.Logger = get_logger(__name__)

DEFAULT_FORGE_URL = "https://codeberg.org"
MIRROR_INTERVAL = "8h0m0s"

# target name -> host used for the remote URL
MIRROR_TARGETS: tuple[tuple[str, str], ...] = (
    ("github", "github.com"),
    ("gitlab", "gitlab.com"),
)


@dataclass(frozen=True)
class MirrorOutcome:
    """What happened to one mirror target: added, exists, or skipped."""

    target: str
    status: str
    remote_address: Optional[str] = None


class MirrorClient:
    """Client for the Forgejo `push_mirrors` endpoints of one repository."""

    def __init__(self, base_url: str, owner: str, repo: str, token: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.owner = owner
        self.repo = repo
        self._headers = {"Authorization": f"token {token}"}

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/v1/repos/{quote(self.owner)}/{quote(self.repo)}/push_mirrors"

    def list_mirrors(self) -> list[str]:
        """Remote addresses of the existing push mirrors."""
        body = request_json("GET", self.endpoint, self._headers)
        mirrors: list[Any] = body if isinstance(body, list) else []
        return [
            item["remote_address"]
            for item in mirrors
            if isinstance(item, dict) and isinstance(item.get("remote_address"), str)
        ]

    def add_mirror(self, remote_address: str, username: str, password: str) -> None:
        payload = {
            "remote_address": remote_address,
            "remote_username": username,
            "remote_password": password,
            "interval": MIRROR_INTERVAL,
            "sync_on_commit": True,
        }
        request_json("POST", self.endpoint, self._headers, payload=payload)


def forge_base_url(config: ReleaseScholarConfig) -> str:
    """
    Base URL of the forge that will hold the push mirrors.

    Raises:
        ConfigValidationError: The forge has no Forgejo API and no forge_url
            points at one.
    """
    if config.forge_url:
        return config.forge_url
    if config.forge == "codeberg":
        return DEFAULT_FORGE_URL
    raise ConfigValidationError(
        f"Push mirrors need a Forgejo forge; forge '{config.forge}' requires forge_url"
    )


def make_client(config: ReleaseScholarConfig, repo_name: str) -> MirrorClient:
    """
    Build a MirrorClient from the `mirrors` config section.

    Raises:
        ConfigValidationError: Forge credentials are not configured.
    """
    mirrors = config.mirrors
    if mirrors is None or not mirrors.codeberg_user or not mirrors.codeberg_token:
        raise ConfigValidationError(
            "mirrors.codeberg_user and mirrors.codeberg_token must be set "
            "(usually in the machine-level config)"
        )
    return MirrorClient(
        forge_base_url(config), mirrors.codeberg_user, repo_name, mirrors.codeberg_token
    )


def _credentials(mirrors: MirrorsConfig, target: str) -> tuple[Optional[str], Optional[str]]:
    return getattr(mirrors, f"{target}_user"), getattr(mirrors, f"{target}_token")


def configure_mirrors(
    config: ReleaseScholarConfig, repo_name: str, client: MirrorClient
) -> list[MirrorOutcome]:
    """
    Add a push mirror for every target with configured credentials.

    Targets that already have a mirror on the forge are left alone.

    Raises:
        RemoteServiceError: The forge rejected a request.
    """
    mirrors = config.mirrors or MirrorsConfig()
    existing = client.list_mirrors()
    outcomes: list[MirrorOutcome] = []

    for target, host in MIRROR_TARGETS:
        user, token = _credentials(mirrors, target)
        if not user or not token:
            outcomes.append(MirrorOutcome(target=target, status="skipped"))
            _logger.info("Mirror target not configured", extra={"target": target})
            continue

        remote = f"https://{host}/{user}/{repo_name}.git"
        if any(host in address for address in existing):
            outcomes.append(MirrorOutcome(target=target, status="exists", remote_address=remote))
            _logger.info("Mirror already exists", extra={"target": target})
            continue

        client.add_mirror(remote, user, token)
        outcomes.append(MirrorOutcome(target=target, status="added", remote_address=remote))
        _logger.info("Mirror added", extra={"target": target, "remote": remote})

    return outcomes
