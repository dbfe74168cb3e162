# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the release-scholar CLI.

Each function here corresponds to one CLI subcommand, takes the parsed
argparse namespace and returns an exit code. Results meant for the user go to
stdout; diagnostics go through the structured logger (stderr).
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from release_scholar.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from release_scholar.config.exceptions import ConfigError
from release_scholar.config.loader import load_config, resolve_project_name
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.exceptions import (
    IoError,
    ParseError,
    ReleaseScholarError,
    RemoteServiceError,
    RepositoryError,
)
from release_scholar.logging.logger import get_logger, set_log_level


def _write(text: str = "") -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def _load(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[ReleaseScholarConfig], logging.Logger, Path]:
    """
    The shared setup every command needs: resolve the project dir, load the
    config, apply the log level.

    Returns (exit_code, config, logger, project_dir). If exit_code is not
    SUCCESS the caller should return it immediately.
    """
    logger = get_logger(f"release_scholar.cli.{command_name}")
    project_dir = Path(args.project_dir).expanduser()

    if not project_dir.is_dir():
        logger.error("Project directory not found", extra={"path": str(project_dir)})
        return USER_ERROR, None, logger, project_dir

    config_path = Path(args.config).expanduser() if args.config is not None else None
    try:
        config = load_config(project_dir, config_path=config_path)
        set_log_level(args.log_level or config.log_level)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger, project_dir
    except ValueError as err:
        logger.error("Invalid log level", extra={"command": command_name, "error": str(err)})
        return CONFIG_ERROR, None, logger, project_dir

    logger.debug(
        "Command started",
        extra={"command": command_name, "project_dir": str(project_dir)},
    )
    return SUCCESS, config, logger, project_dir


def handle_init(args: argparse.Namespace) -> int:
    """Create whichever starter metadata files are missing."""
    exit_code, config, logger, project_dir = _load(args, "init")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from release_scholar.scaffold.init import init_project

        created = init_project(project_dir, config)
    except OSError as err:
        logger.error("Init failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    if not created:
        _write("Nothing to do: all starter files already exist.")
    for path in created:
        _write(f"Created {path.name}")
    return SUCCESS


def handle_check(args: argparse.Namespace) -> int:
    """Audit the project and print the report. Fails only on fail Findings."""
    exit_code, config, logger, project_dir = _load(args, "check")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from release_scholar.audit.engine import run_audit
        from release_scholar.audit.report import render_report

        report = run_audit(project_dir, config)
        render_report(report, sys.stdout)
    except Exception as err:
        logger.error("Check failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    return VALIDATION_ERROR if report.has_failures else SUCCESS


def handle_build(args: argparse.Namespace) -> int:
    """Build the release bundle for the requested (or HEAD's) tag."""
    exit_code, config, logger, project_dir = _load(args, "build")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from release_scholar.release.builder import build_release

        result = build_release(project_dir, config, tag=args.tag)
    except RepositoryError as err:
        logger.error("Cannot determine what to build", extra={"error": str(err)})
        return USER_ERROR
    except ParseError as err:
        logger.error("Invalid citation metadata", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Build failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    _write(f"Built {result.tag} in {result.bundle_dir}")
    _write(f"  {result.archive_path.name}  ({result.manifest.file_count} files)")
    _write(f"  SHA256 {result.archive_sha256}")
    return SUCCESS


def handle_verify(args: argparse.Namespace) -> int:
    """Re-hash a built bundle against its checksums.txt."""
    exit_code, config, logger, project_dir = _load(args, "verify")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from release_scholar.git.repository import GitRepository
        from release_scholar.release.builder import resolve_release_tag
        from release_scholar.release.checksums import verify_bundle

        repo = GitRepository.open(project_dir)
        tag = resolve_release_tag(repo, args.tag)
        bundle_dir = repo.root / config.archive_dir / tag
        result = verify_bundle(bundle_dir)
    except RepositoryError as err:
        logger.error("Cannot determine which bundle to verify", extra={"error": str(err)})
        return USER_ERROR
    except Exception as err:
        logger.error("Verification failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    if not result.is_valid:
        for name in result.mismatches:
            _write(f"MISMATCH {name}")
        for name in result.missing_files:
            _write(f"MISSING  {name}")
        for message in result.errors:
            _write(f"ERROR    {message}")
        return VALIDATION_ERROR

    _write(f"OK {bundle_dir} ({result.checked_count} file(s) verified)")
    return SUCCESS


def handle_publish(args: argparse.Namespace) -> int:
    """Upload the bundle to Zenodo; publish only with --confirm."""
    exit_code, config, logger, project_dir = _load(args, "publish")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from release_scholar.publish.zenodo import (
        ZenodoClient,
        add_doi_badge,
        load_token,
        publish_release,
    )

    try:
        token = load_token(args.sandbox)
    except IoError as err:
        logger.error("Zenodo token unavailable", extra={"error": str(err)})
        return CONFIG_ERROR

    client = ZenodoClient(token, sandbox=args.sandbox)
    try:
        result = publish_release(project_dir, config, client, confirm=args.confirm, tag=args.tag)
    except RepositoryError as err:
        logger.error("Cannot determine what to publish", extra={"error": str(err)})
        return USER_ERROR
    except IoError as err:
        logger.error("Release bundle unavailable", extra={"error": str(err)})
        return USER_ERROR
    except RemoteServiceError as err:
        logger.error("Zenodo request failed", extra={"error": str(err), "status": err.status})
        return RUNTIME_ERROR
    except Exception as err:
        logger.error("Publish failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    if not result.published:
        _write(f"Draft deposition {result.deposition_id} created (not published).")
        _write(f"Review at: {result.url}")
        _write("Re-run with --confirm to publish it.")
        return SUCCESS

    _write(f"Deposition {result.deposition_id} published.")
    _write(f"DOI: {result.doi or 'pending'}")
    _write(f"URL: {result.url}")
    if result.doi:
        try:
            if add_doi_badge(project_dir / "README.md", result.doi, result.url):
                _write("Added DOI badge to README.md; commit it with the next change.")
        except OSError as err:
            logger.warning("Could not add DOI badge", extra={"error": str(err)})
    return SUCCESS


def handle_mirror(args: argparse.Namespace) -> int:
    """Configure GitHub/GitLab push mirrors on the forge."""
    exit_code, config, logger, project_dir = _load(args, "mirror")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from release_scholar.publish.mirror import configure_mirrors, make_client

    repo_name = resolve_project_name(config, project_dir)
    try:
        client = make_client(config, repo_name)
        outcomes = configure_mirrors(config, repo_name, client)
    except ConfigError as err:
        logger.error("Mirror configuration incomplete", extra={"error": str(err)})
        return CONFIG_ERROR
    except ReleaseScholarError as err:
        logger.error("Mirror setup failed", extra={"error": str(err)})
        return RUNTIME_ERROR

    for outcome in outcomes:
        suffix = f" -> {outcome.remote_address}" if outcome.remote_address else ""
        _write(f"{outcome.target}: {outcome.status}{suffix}")
    return SUCCESS
