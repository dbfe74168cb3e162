# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Publication metadata (metadata.json) derived from CITATION.cff.

The mapping is fixed:
    title            -> title
    abstract         -> description
    authors[]        -> creators[]  ("Family, Given", bare ORCID id)
    keywords[]       -> keywords
    license          -> license
    version          -> version
    date-released    -> publication_date
    repository-code  -> related_identifiers[0] (isSupplementTo)
    config.language  -> language

Serialization is deterministic (sorted keys, fixed indent, trailing newline)
because metadata.json sits in the release bundle next to the archive and is
expected to be identical across rebuilds of the same tag.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.metadata.citation import CitationRecord

ORCID_URL_PREFIX = "https://orcid.org/"
UPLOAD_TYPE = "software"


@dataclass(frozen=True)
class Creator:
    name: str
    orcid: Optional[str] = None
    affiliation: Optional[str] = None


@dataclass(frozen=True)
class RelatedIdentifier:
    identifier: str
    relation: str = "isSupplementTo"
    resource_type: str = "software"
    scheme: str = "url"


@dataclass(frozen=True)
class ReleaseMetadata:
    title: str
    creators: tuple[Creator, ...]
    language: str
    description: Optional[str] = None
    keywords: tuple[str, ...] = ()
    license: Optional[str] = None
    version: Optional[str] = None
    publication_date: Optional[str] = None
    related_identifiers: tuple[RelatedIdentifier, ...] = ()
    upload_type: str = UPLOAD_TYPE

    @classmethod
    def from_citation(
        cls, record: CitationRecord, config: ReleaseScholarConfig
    ) -> "ReleaseMetadata":
        creators = tuple(
            Creator(
                name=author.display_name or "",
                orcid=_bare_orcid(author.orcid),
                affiliation=author.affiliation,
            )
            for author in record.authors
        )
        related: tuple[RelatedIdentifier, ...] = ()
        if record.repository_code:
            related = (RelatedIdentifier(identifier=record.repository_code),)

        return cls(
            title=record.title or "",
            creators=creators,
            language=config.language,
            description=record.abstract,
            keywords=record.keywords,
            license=record.license,
            version=record.version,
            publication_date=record.date_released,
            related_identifiers=related,
        )

    def to_dict(self) -> dict[str, Any]:
        """The deposit document: `{"metadata": {...}}` with unset fields omitted."""
        metadata: dict[str, Any] = {
            "title": self.title,
            "upload_type": self.upload_type,
            "language": self.language,
            "creators": [_drop_none(vars(creator)) for creator in self.creators],
        }
        optional: dict[str, Any] = {
            "description": self.description,
            "license": self.license,
            "version": self.version,
            "publication_date": self.publication_date,
        }
        metadata.update(_drop_none(optional))
        if self.keywords:
            metadata["keywords"] = list(self.keywords)
        if self.related_identifiers:
            metadata["related_identifiers"] = [vars(item).copy() for item in self.related_identifiers]
        return {"metadata": metadata}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def _bare_orcid(orcid: Optional[str]) -> Optional[str]:
    if orcid is None:
        return None
    return orcid.removeprefix(ORCID_URL_PREFIX)


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
