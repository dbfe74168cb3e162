# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Secret scanner for tracked files and historical blobs.

Static analysis only: contents are matched against a fixed rule set and never
executed or decoded beyond UTF-8 text. Binary content is skipped.

Rules come in two confidence levels:
  - fail: shapes that are almost never anything but a credential (private key
    headers, provider token prefixes)
  - warn: heuristics with real false-positive rates (password assignments)
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from release_scholar.audit.models import Category, Finding, Severity
from release_scholar.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)

# Same heuristic git uses: a NUL in the first 8000 bytes means binary.
BINARY_SNIFF_BYTES = 8000


@dataclass(frozen=True)
class SecretRule:
    """A named credential shape and how seriously to take a match."""

    name: str
    description: str
    pattern: re.Pattern[str]
    severity: Severity


SECRET_RULES: tuple[SecretRule, ...] = (
    SecretRule(
        "private_key",
        "Private key",
        re.compile(r"-----BEGIN\s+(?:RSA |DSA |EC |OPENSSH |PGP |ENCRYPTED )?PRIVATE KEY(?: BLOCK)?-----"),
        Severity.FAIL,
    ),
    SecretRule(
        "aws_access_key",
        "AWS access key",
        re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b"),
        Severity.FAIL,
    ),
    SecretRule(
        "github_token",
        "GitHub token",
        re.compile(r"\bgh[pousr]_[A-Za-z0-9_]{36,}"),
        Severity.FAIL,
    ),
    SecretRule(
        "gitlab_token",
        "GitLab personal access token",
        re.compile(r"\bglpat-[A-Za-z0-9_\-]{20,}"),
        Severity.FAIL,
    ),
    SecretRule(
        "slack_token",
        "Slack token",
        re.compile(r"\bxox[abprs]-[A-Za-z0-9-]{10,}"),
        Severity.FAIL,
    ),
    SecretRule(
        "api_key",
        "API key or access token",
        re.compile(
            r"""(?i)(?:api[_-]?key|api[_-]?secret|access[_-]?token|auth[_-]?token)\s*[:=]\s*['"]?\w{16,}"""
        ),
        Severity.FAIL,
    ),
    SecretRule(
        "password_assignment",
        "Password assignment",
        # Inside a larger name (DB_PASSWORD) too; unquoted values need 8+ characters
        # and must end the token, so `password = os.environ[...]` stays quiet.
        re.compile(
            r"""(?i)(?<![A-Za-z])(?:password|passwd|pwd)['"]?[ \t]*[:=][ \t]*"""
            r"""(?:'[^'\n]+'|"[^"\n]+"|[^\s'"()\[\]{}$.,;]{8,}(?![^\s,;]))"""
        ),
        Severity.WARN,
    ),
)


def is_binary(content: bytes) -> bool:
    """True when the content should not be treated as text."""
    return b"\0" in content[:BINARY_SNIFF_BYTES]


def _line_number(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


class SecretScanner:
    """
    Applies SECRET_RULES to files and blobs for one audit run.

    A (rule, path) pair is reported at most once per scanner, however many
    times the shape appears and whether it turns up in the working tree, in
    history, or both. Scan the working tree first so that findings carry a
    line number whenever one is available.
    """

    def __init__(self, rules: tuple[SecretRule, ...] = SECRET_RULES) -> None:
        self._rules = rules
        self._reported: set[tuple[str, str]] = set()
        self.scanned = 0
        self.skipped_binary = 0

    def scan_file(self, path: str, content: bytes) -> list[Finding]:
        """Scan a working-tree file; findings carry the first matching line."""
        return self._scan(path, content, self._rules, with_lines=True, origin="tracked file")

    def scan_blob(self, path: str, content: bytes) -> list[Finding]:
        """
        Scan a historical blob; no line numbers, only the stored path.

        Only fail-severity rules apply to history. Old revisions are full of
        example configs, and a password heuristic there is mostly noise.
        """
        rules = tuple(rule for rule in self._rules if rule.severity is Severity.FAIL)
        return self._scan(path, content, rules, with_lines=False, origin="git history")

    def _scan(
        self,
        path: str,
        content: bytes,
        rules: tuple[SecretRule, ...],
        with_lines: bool,
        origin: str,
    ) -> list[Finding]:
        if is_binary(content):
            self.skipped_binary += 1
            return []
        self.scanned += 1

        text = content.decode("utf-8", errors="replace")
        findings: list[Finding] = []
        for rule in rules:
            key = (rule.name, path)
            if key in self._reported:
                continue
            match = rule.pattern.search(text)
            if match is None:
                continue
            self._reported.add(key)
            line: Optional[int] = _line_number(text, match.start()) if with_lines else None
            findings.append(
                Finding(
                    category=Category.SECURITY,
                    severity=rule.severity,
                    message=f"Possible {rule.description} found in {origin}: {path}",
                    path=path,
                    line=line,
                )
            )
            _logger.debug(
                "Secret pattern matched",
                extra={"rule": rule.name, "path": path, "line": line, "origin": origin},
            )
        return findings

    @property
    def reported_count(self) -> int:
        return len(self._reported)
