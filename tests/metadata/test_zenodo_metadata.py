# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the CITATION.cff to publication metadata mapping.
"""

import json

from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.metadata.citation import parse_citation
from release_scholar.metadata.zenodo import ReleaseMetadata


class TestFromCitation:
    def test_field_mapping(self, make_citation, default_config: ReleaseScholarConfig) -> None:  # type: ignore[no-untyped-def]
        metadata = ReleaseMetadata.from_citation(parse_citation(make_citation()), default_config)
        document = metadata.to_dict()["metadata"]

        assert document["title"] == "Example Tool"
        assert document["upload_type"] == "software"
        assert document["description"] == "A tool that does one thing well."
        assert document["version"] == "0.1.0"
        assert document["license"] == "MIT"
        assert document["publication_date"] == "2024-01-31"
        assert document["language"] == "eng"
        assert document["keywords"] == ["research software", "reproducibility"]
        assert document["creators"] == [{"name": "Lovelace, Ada", "orcid": "0000-0002-1825-0097"}]
        assert document["related_identifiers"] == [
            {
                "identifier": "https://codeberg.org/ada/example-tool",
                "relation": "isSupplementTo",
                "resource_type": "software",
                "scheme": "url",
            }
        ]

    def test_language_comes_from_config(self, make_citation) -> None:  # type: ignore[no-untyped-def]
        config = ReleaseScholarConfig(language="deu")
        metadata = ReleaseMetadata.from_citation(parse_citation(make_citation()), config)
        assert metadata.language == "deu"

    def test_unset_fields_are_omitted(self, default_config: ReleaseScholarConfig) -> None:
        record = parse_citation("title: Bare\nauthors:\n  - name: Some Lab\n")
        document = ReleaseMetadata.from_citation(record, default_config).to_dict()["metadata"]

        assert document["creators"] == [{"name": "Some Lab"}]
        for key in ("description", "version", "license", "keywords", "related_identifiers"):
            assert key not in document


class TestSerialization:
    def test_json_is_sorted_and_newline_terminated(self, make_citation, default_config: ReleaseScholarConfig) -> None:  # type: ignore[no-untyped-def]
        text = ReleaseMetadata.from_citation(parse_citation(make_citation()), default_config).to_json()

        assert text.endswith("}\n")
        parsed = json.loads(text)
        assert list(parsed["metadata"]) == sorted(parsed["metadata"])

    def test_serialization_is_stable(self, make_citation, default_config: ReleaseScholarConfig) -> None:  # type: ignore[no-untyped-def]
        record = parse_citation(make_citation())
        first = ReleaseMetadata.from_citation(record, default_config).to_json()
        second = ReleaseMetadata.from_citation(parse_citation(make_citation()), default_config).to_json()
        assert first == second

    def test_non_ascii_is_kept_readable(self, default_config: ReleaseScholarConfig) -> None:
        record = parse_citation("title: Café Analysis\n")
        assert "Café Analysis" in ReleaseMetadata.from_citation(record, default_config).to_json()
