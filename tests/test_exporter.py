"""
Unit tests for the JSON Exporter

Tests:
- Mapping configuration document
- File export, default location and serialization failures
- SQL script and transform rule listings
"""

import json
from datetime import datetime

import pytest

from hera_mapper.config import app_config
from hera_mapper.exporter.json_exporter import DEFAULT_FILE_NAME, JsonExporter
from hera_mapper.mapper.session_builder import SessionBuilder
from hera_mapper.samples import load_sample_session
from hera_mapper.schema.models import HERA_SCHEMA


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def exporter():
    return JsonExporter()


@pytest.fixture
def session():
    return load_sample_session().session


# ============================================================================
# TESTS
# ============================================================================


class TestBuildConfig:
    """Test the configuration document"""

    def test_top_level_keys(self, exporter, session):
        """Session, legacy data, mappings, schema reference and export date"""
        config = exporter.build_config(session)

        assert set(config) == {"session", "legacyData", "mappings", "heraSchema", "exportDate"}
        assert config["heraSchema"] == HERA_SCHEMA
        assert config["session"]["name"] == "Chef Lebanon sample"
        assert config["session"]["status"] == "draft"

    def test_mappings_and_summary(self, exporter, session):
        """Mappings are listed in order and summarized"""
        config = exporter.build_config(session)

        assert len(config["mappings"]) == len(session.mappings) == 21
        assert config["mappings"][0]["legacyField"] == "restaurants.restaurant_id"
        assert config["session"]["summary"]["mappings"] == 21
        assert config["session"]["summary"]["entities"] == 4


class TestExport:
    """Test writing the JSON file"""

    def test_export_to_path(self, exporter, session, tmp_path):
        """The written file holds the configuration document"""
        output = exporter.export(session, tmp_path / "out" / "mapping.json")

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["session"]["id"] == session.id
        assert data["legacyData"][0]["name"] == "restaurants"

    def test_non_ascii_kept(self, exporter, session, tmp_path):
        """Text is written as UTF-8, not escaped"""
        output = exporter.export(session, tmp_path / "mapping.json")

        assert "9846979500" in output.read_text(encoding="utf-8")
        assert "\\u2011" not in output.read_text(encoding="utf-8")

    def test_default_location(self, exporter, session, tmp_path, monkeypatch):
        """Without a path the file goes to the output directory"""
        monkeypatch.setattr(app_config, "output_dir", str(tmp_path))

        output = exporter.export(session)

        assert output == tmp_path / DEFAULT_FILE_NAME
        assert output.exists()

    def test_unserializable_values(self, exporter, tmp_path):
        """Values JSON cannot represent raise TypeError and write nothing"""
        session = SessionBuilder().from_data([{"visited": datetime(2024, 1, 1)}], "visits").session
        target = tmp_path / "mapping.json"

        with pytest.raises(TypeError):
            exporter.export(session, target)

        assert not target.exists()


class TestScripts:
    """Test text artifacts"""

    def test_sql_script(self, exporter, session):
        """One entity insert per collection, tenant bound, no foreign keys"""
        script = exporter.export_sql_script(session)

        assert script.count("INSERT INTO core_entities") == 4
        assert (
            "INSERT INTO core_entities (id, organization_id, entity_type, menu_item_name) "
            "VALUES (gen_random_uuid(), :organization_id, 'menu_item', :name);"
        ) in script
        assert "'legacy_item_id', 'text', :item_id" in script
        assert "jsonb_build_object('section_id', :section_id)" in script
        assert "REFERENCES" not in script

    def test_transform_rules(self, exporter, session):
        """Each mapping is listed with its target and rule"""
        rules = exporter.export_transform_rules(session).splitlines()

        assert rules[0] == "Transform rules for session 'Chef Lebanon sample'"
        price = [line for line in rules if line.startswith("menu_items.price")][0]
        assert price.startswith("menu_items.price -> core_metadata.metadata_value [metadata, 95%]: ")

    def test_ignored_mapping_listed(self, exporter, session):
        """Ignored fields are called out"""
        session.update_mapping(0, mapping_type="ignore")

        rules = exporter.export_transform_rules(session)

        assert "restaurants.restaurant_id: ignored" in rules
