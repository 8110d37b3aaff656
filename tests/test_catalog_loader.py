"""
Tests for the query catalog loader.
"""

import json

import pytest

from sqldiagnostics.domain.errors import CatalogParseError, CatalogReadError
from sqldiagnostics.infrastructure.sql import load_catalog, parse_catalog


class TestParseCatalog:
    """Test cases for parse_catalog."""

    def test_valid_document(self, sample_catalog_data):
        catalog = parse_catalog(json.dumps(sample_catalog_data))

        assert len(catalog) == 3
        assert catalog.source.name == "Test diagnostics"
        assert catalog.source.sqlserverversion == "2019"
        assert catalog.queries[0].query == "SELECT 5 AS X"

    def test_positions_are_one_based(self, sample_catalog_data):
        catalog = parse_catalog(json.dumps(sample_catalog_data))
        positions = [position for position, _ in catalog.enumerate()]
        assert positions == [1, 2, 3]

    def test_missing_and_null_fields_become_empty(self):
        catalog = parse_catalog('{"queries": [{"name": "Only name", "notes": null}]}')

        definition = catalog.queries[0]
        assert definition.description == ""
        assert definition.query == ""
        assert definition.notes == ""
        assert catalog.source.url == ""

    def test_unknown_fields_ignored(self):
        catalog = parse_catalog('{"queries": [{"name": "a", "query": "q", "owner": "x"}], "v": 2}')
        assert catalog.queries[0].name == "a"

    def test_empty_catalog(self):
        assert len(parse_catalog('{"querysource": {}, "queries": []}')) == 0

    def test_utf8_bom_accepted(self):
        content = '{"queries": [{"name": "Größe"}]}'.encode("utf-8-sig")
        assert parse_catalog(content).queries[0].name == "Größe"

    def test_invalid_json(self):
        with pytest.raises(CatalogParseError):
            parse_catalog("{not json")

    def test_top_level_must_be_object(self):
        with pytest.raises(CatalogParseError):
            parse_catalog("[]")

    def test_wrong_shape(self):
        with pytest.raises(CatalogParseError):
            parse_catalog('{"queries": 5}')

    def test_invalid_utf8(self):
        with pytest.raises(CatalogParseError):
            parse_catalog(b'{"queries": ["\xff"]}')


class TestLoadCatalog:
    """Test cases for load_catalog."""

    def test_load_from_file(self, catalog_file):
        catalog = load_catalog(catalog_file)
        assert [d.name for d in catalog.queries] == ["Single Value", "Broken", "Multi Row"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogReadError):
            load_catalog(tmp_path / "missing.json")

    def test_directory_is_read_error(self, tmp_path):
        with pytest.raises(CatalogReadError):
            load_catalog(tmp_path)
