# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CITATION.cff parsing.

The record is deliberately lenient: every field is optional here so the
Citation audit can report each missing field on its own line instead of
stopping at the first one. Only a document that isn't a YAML mapping at all
is a ParseError.

Scalars are normalized to strings. YAML turns `version: 1.0` into a float and
`date-released: 2024-01-31` into a date, and neither is what the author meant.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from release_scholar.exceptions import ParseError

CITATION_FILE = "CITATION.cff"


@dataclass(frozen=True)
class CitationAuthor:
    """One entry of `authors`: a person (given/family names) or an entity (name)."""

    family_names: Optional[str] = None
    given_names: Optional[str] = None
    name: Optional[str] = None
    orcid: Optional[str] = None
    email: Optional[str] = None
    affiliation: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        """`Family, Given` for people, the entity name otherwise; None if nameless."""
        if self.family_names and self.given_names:
            return f"{self.family_names}, {self.given_names}"
        if self.family_names:
            return self.family_names
        if self.name:
            return self.name
        return None


@dataclass(frozen=True)
class CitationRecord:
    cff_version: Optional[str]
    title: Optional[str]
    version: Optional[str]
    license: Optional[str]
    date_released: Optional[str]
    authors: tuple[CitationAuthor, ...]
    abstract: Optional[str] = None
    repository_code: Optional[str] = None
    keywords: tuple[str, ...] = ()


def _scalar(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    return None


def _parse_author(raw: Any) -> CitationAuthor:
    if not isinstance(raw, dict):
        return CitationAuthor()
    return CitationAuthor(
        family_names=_scalar(raw.get("family-names")),
        given_names=_scalar(raw.get("given-names")),
        name=_scalar(raw.get("name")),
        orcid=_scalar(raw.get("orcid")),
        email=_scalar(raw.get("email")),
        affiliation=_scalar(raw.get("affiliation")),
    )


def parse_citation(text: str) -> CitationRecord:
    """
    Parse the text of a CITATION.cff document.

    Raises:
        ParseError: If the text is not valid YAML or not a mapping.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise ParseError(f"Invalid YAML in {CITATION_FILE}: {err}") from err

    if not isinstance(document, dict):
        raise ParseError(f"{CITATION_FILE} must contain a YAML mapping")

    raw_authors = document.get("authors")
    authors = tuple(_parse_author(item) for item in raw_authors) if isinstance(raw_authors, list) else ()

    raw_keywords = document.get("keywords")
    keywords: tuple[str, ...] = ()
    if isinstance(raw_keywords, list):
        keywords = tuple(word for word in (_scalar(item) for item in raw_keywords) if word)

    return CitationRecord(
        cff_version=_scalar(document.get("cff-version")),
        title=_scalar(document.get("title")),
        version=_scalar(document.get("version")),
        license=_scalar(document.get("license")),
        date_released=_scalar(document.get("date-released")),
        authors=authors,
        abstract=_scalar(document.get("abstract")),
        repository_code=_scalar(document.get("repository-code")),
        keywords=keywords,
    )


def parse_citation_bytes(content: bytes) -> CitationRecord:
    """
    Parse CITATION.cff content as stored in git.

    Raises:
        ParseError: If the content is not UTF-8 or fails parse_citation.
    """
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as err:
        raise ParseError(f"{CITATION_FILE} is not valid UTF-8: {err}") from err
    return parse_citation(text)
