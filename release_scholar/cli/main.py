# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for release-scholar.

This is the single root command; every operation is a subcommand. No
interactive prompts: anything irreversible needs an explicit flag.

The global options (--project-dir, --config, --log-level) are inherited by
every subcommand through argparse's parent parser mechanism.

Usage:
    release-scholar <subcommand> [options]
    release-scholar check --project-dir path/to/project
    release-scholar build --tag v1.2.0
    release-scholar publish --sandbox --confirm
"""

import argparse
import sys
from typing import Optional, Sequence

from release_scholar import __version__
from release_scholar.cli.commands import (
    handle_build,
    handle_check,
    handle_init,
    handle_mirror,
    handle_publish,
    handle_verify,
)
from release_scholar.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    Uses add_help=False so help text doesn't collide between the parent and
    the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--project-dir",
        type=str,
        default=".",
        dest="project_dir",
        help="Path to the project directory (default: current directory).",
    )
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Project config file to use instead of <project-dir>/.release-scholar.yaml.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: log_level from config, else INFO).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """
    Register all subcommands with their handler functions.

    Each subcommand gets the global options from the parent parser and sets
    its handler via set_defaults(func=...).
    """
    commands = [
        ("init", "Create missing CITATION.cff, CHANGELOG.md, LICENSE and config.", handle_init),
        ("check", "Audit the project for release readiness.", handle_check),
        ("build", "Build the deterministic release bundle for a tag.", handle_build),
        ("verify", "Re-hash a release bundle against its checksums.txt.", handle_verify),
        ("publish", "Upload a release bundle to Zenodo.", handle_publish),
        ("mirror", "Set up push mirrors from the forge to GitHub/GitLab.", handle_mirror),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler, tag=None)

    for name in ("build", "verify", "publish"):
        subparsers.choices[name].add_argument(
            "--tag",
            type=str,
            default=None,
            help="Release tag (vX.Y.Z); defaults to the release tag at HEAD.",
        )

    publish_parser = subparsers.choices["publish"]
    publish_parser.add_argument(
        "--sandbox",
        action="store_true",
        default=False,
        help="Use the Zenodo sandbox instead of production.",
    )
    publish_parser.add_argument(
        "--confirm",
        action="store_true",
        default=False,
        help="Publish the deposition (irreversible). Without it a draft is created.",
    )


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="release-scholar",
        description="Validate, audit, and package scholarly software releases.",
    )
    root_parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, shows help and exits with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
