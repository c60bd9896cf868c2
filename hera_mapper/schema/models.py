"""Models for legacy data structures and the universal target schema."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LegacyFieldType(str, Enum):
    """Field types inferred from raw legacy values."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"


class HeraTable(str, Enum):
    """Tables of the universal schema."""

    ENTITIES = "core_entities"
    DYNAMIC_DATA = "core_dynamic_data"
    METADATA = "core_metadata"
    TRANSACTIONS = "universal_transactions"


# Target schema reference. No foreign keys anywhere: relationships are
# resolved by organization_id and application logic (manual joins).
HERA_SCHEMA: Dict[str, Dict[str, Any]] = {
    HeraTable.ENTITIES.value: {
        "fields": [
            "id", "organization_id", "entity_type", "entity_name", "entity_code",
            "is_active", "created_at", "updated_at",
        ],
        "description": "Universal entity table - no foreign keys, manual joins only, "
                       "<entity_type>_name/_code naming convention",
    },
    HeraTable.DYNAMIC_DATA.value: {
        "fields": [
            "id", "organization_id", "entity_id", "field_name", "field_value",
            "field_type", "created_at",
        ],
        "description": "Typed key/value attributes attached to an entity without schema changes",
    },
    HeraTable.METADATA.value: {
        "fields": [
            "id", "organization_id", "entity_id", "metadata_type", "metadata_category",
            "metadata_key", "metadata_value", "created_at",
        ],
        "description": "JSON metadata for structured attributes (location, pricing, contact, text)",
    },
    HeraTable.TRANSACTIONS.value: {
        "fields": [
            "id", "organization_id", "transaction_type", "transaction_number",
            "total_amount", "created_at",
        ],
        "description": "Universal transactions - linked to entities via manual joins",
    },
}


@dataclass(frozen=True)
class LegacyField:
    """A single attribute discovered in a legacy dataset."""

    name: str
    type: LegacyFieldType
    sample_value: Any = None
    is_required: bool = False
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "type": self.type.value,
            "sampleValue": self.sample_value,
            "isRequired": self.is_required,
            "description": self.description,
        }


@dataclass
class LegacyEntity:
    """A record collection discovered in a legacy dataset."""

    name: str
    type: str
    fields: List[LegacyField] = field(default_factory=list)
    sample_data: List[Dict[str, Any]] = field(default_factory=list)

    def get_field(self, name: str) -> Optional[LegacyField]:
        """Return field by name."""
        for legacy_field in self.fields:
            if legacy_field.name.lower() == name.lower():
                return legacy_field
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "fields": [f.to_dict() for f in self.fields],
            "sampleData": self.sample_data,
        }


@dataclass
class LegacyDataset:
    """Result of analyzing one uploaded file."""

    source_name: str
    source_format: str = "json"
    entities: List[LegacyEntity] = field(default_factory=list)
    total_records: int = 0

    @property
    def total_fields(self) -> int:
        return sum(len(entity.fields) for entity in self.entities)

    def get_entity(self, name: str) -> Optional[LegacyEntity]:
        """Return entity by name."""
        for entity in self.entities:
            if entity.name.lower() == name.lower():
                return entity
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sourceName": self.source_name,
            "sourceFormat": self.source_format,
            "totalRecords": self.total_records,
            "totalFields": self.total_fields,
            "entities": [entity.to_dict() for entity in self.entities],
        }
