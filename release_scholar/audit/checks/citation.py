# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Citation category: CITATION.cff completeness and the tag/version contract.

The version in CITATION.cff must equal the release tag at HEAD without its
leading `v`. That is the binding between the archive and the citation users
will copy, so a mismatch is a failure, not a warning.
"""

import re
from typing import Optional

from release_scholar.audit.checks.git_state import select_release_tag, tag_version
from release_scholar.audit.models import Category, Finding, failed, passed
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.exceptions import ParseError
from release_scholar.git.snapshot import ProjectSnapshot
from release_scholar.metadata.citation import CITATION_FILE, CitationRecord, parse_citation_bytes

ORCID_PATTERN = re.compile(r"^https://orcid\.org/(\d{4})-(\d{4})-(\d{4})-(\d{3}[\dX])$")


def orcid_check_digit(base_digits: str) -> str:
    """ISO 7064 MOD 11-2 check character for the first 15 digits of an ORCID iD."""
    total = 0
    for char in base_digits:
        total = (total + int(char)) * 2
    result = (12 - total % 11) % 11
    return "X" if result == 10 else str(result)


def is_valid_orcid(orcid: str) -> bool:
    """True for `https://orcid.org/XXXX-XXXX-XXXX-XXXX` with a correct check digit."""
    match = ORCID_PATTERN.match(orcid)
    if match is None:
        return False
    digits = "".join(match.groups())
    return orcid_check_digit(digits[:15]) == digits[15]


def _required_fields(record: CitationRecord) -> list[Finding]:
    findings: list[Finding] = []
    fields: tuple[tuple[str, Optional[str]], ...] = (
        ("cff-version", record.cff_version),
        ("title", record.title),
        ("version", record.version),
        ("license", record.license),
        ("date-released", record.date_released),
    )
    for name, value in fields:
        if value:
            findings.append(passed(Category.CITATION, f"{name} present", path=CITATION_FILE))
        else:
            findings.append(failed(Category.CITATION, f"{name} missing", path=CITATION_FILE))
    return findings


def _authors(record: CitationRecord) -> list[Finding]:
    if not record.authors:
        return [failed(Category.CITATION, "No authors listed", path=CITATION_FILE)]

    findings = [
        passed(Category.CITATION, f"{len(record.authors)} author(s) found", path=CITATION_FILE)
    ]
    for number, author in enumerate(record.authors, start=1):
        if author.display_name is None:
            findings.append(
                failed(
                    Category.CITATION,
                    f"Author {number} has no family-names or name",
                    path=CITATION_FILE,
                )
            )
        if author.orcid is None:
            continue
        if is_valid_orcid(author.orcid):
            findings.append(
                passed(Category.CITATION, f"Author {number} ORCID valid", path=CITATION_FILE)
            )
        else:
            findings.append(
                failed(
                    Category.CITATION,
                    f"Author {number} ORCID invalid: {author.orcid}",
                    path=CITATION_FILE,
                )
            )
    return findings


def _version_matches_tag(record: CitationRecord, snapshot: ProjectSnapshot) -> list[Finding]:
    tag = select_release_tag(snapshot.head_tags)
    # No tag is already a Git failure; version presence is reported above.
    if tag is None or not record.version:
        return []
    expected = tag_version(tag)
    if record.version == expected:
        return [
            passed(
                Category.CITATION, f"version matches git tag ({record.version})", path=CITATION_FILE
            )
        ]
    return [
        failed(
            Category.CITATION,
            f"version '{record.version}' does not match git tag '{tag}' (expected '{expected}')",
            path=CITATION_FILE,
        )
    ]


def check_citation(snapshot: ProjectSnapshot, config: ReleaseScholarConfig) -> list[Finding]:
    tracked = snapshot.get(CITATION_FILE)
    if tracked is None:
        return [failed(Category.CITATION, f"{CITATION_FILE} not found", path=CITATION_FILE)]

    try:
        record = parse_citation_bytes(tracked.content)
    except ParseError as err:
        return [failed(Category.CITATION, str(err), path=CITATION_FILE)]

    findings = _required_fields(record)
    findings.extend(_authors(record))
    findings.extend(_version_matches_tag(record, snapshot))
    return findings
