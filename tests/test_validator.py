"""
Unit tests for Compliance Validation

Tests:
- Sample session passes and moves to validated
- Each required check catches its violation
- Scoring and advisory checks
"""

import pytest

from hera_mapper.mapper.mapping import HeraMapping, MappingSession, MappingType, SessionStatus
from hera_mapper.samples import load_sample_session
from hera_mapper.schema.models import HeraTable, LegacyEntity, LegacyField, LegacyFieldType
from hera_mapper.validator.compliance import ComplianceValidator, validate_session


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def sample_session():
    return load_sample_session().session


@pytest.fixture
def validator():
    return ComplianceValidator()


def single_field_session(mapping, field_name):
    """Session with one entity of one field and the given mapping"""
    entity = LegacyEntity(
        name="customers",
        type="collection",
        fields=[LegacyField(field_name, LegacyFieldType.TEXT)],
    )
    return MappingSession(name="test", legacy_data=[entity], mappings=[mapping])


def check(report, name):
    return [c for c in report.checks if c.name == name][0]


# ============================================================================
# TESTS
# ============================================================================


class TestComplianceValidator:
    """Test individual checks"""

    def test_sample_session_passes(self, validator, sample_session):
        """Suggested mappings satisfy every check"""
        report = validator.validate(sample_session)

        assert report.passed is True
        assert report.score == 1.0
        assert report.issues == []

    def test_missing_mapping(self, validator, sample_session):
        """Every field must be mapped"""
        sample_session.mappings.pop()

        report = validator.validate(sample_session)

        assert check(report, "coverage").passed is False
        assert "No mapping for menu_items.description" in report.issues
        assert report.passed is False

    def test_duplicate_mapping(self, validator, sample_session):
        """Every field must be mapped only once"""
        sample_session.mappings.append(sample_session.mappings[0])

        report = validator.validate(sample_session)

        assert check(report, "coverage").passed is False

    def test_tenant_column_must_be_exact(self, validator):
        """organization_id may only target the tenant column at full confidence"""
        mapping = HeraMapping(
            legacy_field="customers.organization_id",
            hera_table=HeraTable.DYNAMIC_DATA,
            hera_field="field_value",
            mapping_type=MappingType.DYNAMIC,
            confidence=0.7,
        )

        report = validator.validate(single_field_session(mapping, "organization_id"))

        assert check(report, "tenant_isolation").passed is False

    def test_foreign_key_in_entities_rejected(self, validator):
        """Legacy keys may not become entity columns"""
        mapping = HeraMapping(
            legacy_field="customers.region_id",
            hera_table=HeraTable.ENTITIES,
            hera_field="region_id",
            mapping_type=MappingType.DIRECT,
            confidence=0.9,
            entity_type="customer",
        )

        report = validator.validate(single_field_session(mapping, "region_id"))

        assert check(report, "no_foreign_keys").passed is False
        assert check(report, "universal_naming").passed is False

    def test_foreign_key_in_dynamic_data_rejected(self, validator):
        """Legacy keys belong in metadata"""
        mapping = HeraMapping(
            legacy_field="customers.region_id",
            hera_table=HeraTable.DYNAMIC_DATA,
            hera_field="field_value",
            mapping_type=MappingType.DYNAMIC,
            confidence=0.7,
        )

        report = validator.validate(single_field_session(mapping, "region_id"))

        assert check(report, "no_foreign_keys").passed is False

    def test_non_standard_entity_column(self, validator):
        """Entity columns follow <entity_type>_name/_code"""
        mapping = HeraMapping(
            legacy_field="customers.full_name",
            hera_table=HeraTable.ENTITIES,
            hera_field="full_name",
            mapping_type=MappingType.DIRECT,
            confidence=0.9,
            entity_type="customer",
        )

        report = validator.validate(single_field_session(mapping, "full_name"))

        assert check(report, "universal_naming").passed is False
        assert report.score == round(4 / 6, 4)

    def test_dynamic_usage_is_advisory(self, validator):
        """No dynamic fields lowers the score but does not fail"""
        mapping = HeraMapping(
            legacy_field="customers.name",
            hera_table=HeraTable.ENTITIES,
            hera_field="customer_name",
            mapping_type=MappingType.DIRECT,
            confidence=0.98,
            entity_type="customer",
        )

        report = validator.validate(single_field_session(mapping, "name"))

        assert check(report, "dynamic_data_usage").passed is False
        assert report.passed is True
        assert report.score < 1.0

    def test_report_to_dict(self, validator, sample_session):
        """Serialized report lists every check"""
        data = validator.validate(sample_session).to_dict()

        assert data["passed"] is True
        assert [c["name"] for c in data["checks"]] == [
            "coverage", "tenant_isolation", "no_foreign_keys",
            "confidence_range", "universal_naming", "dynamic_data_usage",
        ]


class TestValidateSession:
    """Test status handling"""

    def test_passing_draft_becomes_validated(self, sample_session):
        """A passing draft advances one step"""
        validate_session(sample_session)

        assert sample_session.status == SessionStatus.VALIDATED

    def test_failing_session_stays_draft(self, sample_session):
        """A failing session keeps its status"""
        sample_session.mappings.pop()

        report = validate_session(sample_session)

        assert report.passed is False
        assert sample_session.status == SessionStatus.DRAFT

    def test_validated_session_not_advanced_again(self, sample_session):
        """Validation never skips ahead to approved"""
        validate_session(sample_session)
        validate_session(sample_session)

        assert sample_session.status == SessionStatus.VALIDATED
