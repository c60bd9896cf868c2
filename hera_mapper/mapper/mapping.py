"""Mapping model: field mappings and the mapping session."""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from hera_mapper.errors import InvalidTransitionError
from hera_mapper.schema.models import HeraTable, LegacyEntity


class MappingType(str, Enum):
    """How a legacy field is carried into the universal schema."""

    DIRECT = "direct"
    TRANSFORM = "transform"
    SPLIT = "split"
    COMBINE = "combine"
    IGNORE = "ignore"
    DYNAMIC = "dynamic"
    METADATA = "metadata"


class DynamicFieldType(str, Enum):
    """Value types stored in core_dynamic_data."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"


class SessionStatus(str, Enum):
    """Mapping session lifecycle, in order."""

    DRAFT = "draft"
    VALIDATED = "validated"
    APPROVED = "approved"
    MIGRATED = "migrated"


_STATUS_ORDER = [
    SessionStatus.DRAFT,
    SessionStatus.VALIDATED,
    SessionStatus.APPROVED,
    SessionStatus.MIGRATED,
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HeraMapping:
    """Represents the mapping of one legacy field to the universal schema."""

    legacy_field: str  # "<entity>.<field>"
    hera_table: HeraTable
    hera_field: str
    mapping_type: MappingType
    confidence: float
    transform_rule: Optional[str] = None
    notes: str = ""
    entity_type: Optional[str] = None
    field_type: Optional[DynamicFieldType] = None
    metadata_type: Optional[str] = None
    metadata_category: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Confidence for {self.legacy_field} must be within [0, 1], got {self.confidence}"
            )

    @property
    def entity_name(self) -> str:
        return self.legacy_field.split(".", 1)[0]

    @property
    def field_name(self) -> str:
        return self.legacy_field.split(".", 1)[-1]

    def with_updates(self, **changes) -> "HeraMapping":
        """Return a copy with the given attributes replaced."""
        if "hera_table" in changes:
            changes["hera_table"] = HeraTable(changes["hera_table"])
        if "mapping_type" in changes:
            changes["mapping_type"] = MappingType(changes["mapping_type"])
        if changes.get("field_type") is not None:
            changes["field_type"] = DynamicFieldType(changes["field_type"])
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "legacyField": self.legacy_field,
            "heraTable": self.hera_table.value,
            "heraField": self.hera_field,
            "mappingType": self.mapping_type.value,
            "transformRule": self.transform_rule,
            "confidence": self.confidence,
            "notes": self.notes,
        }
        if self.entity_type is not None:
            data["entityType"] = self.entity_type
        if self.field_type is not None:
            data["fieldType"] = self.field_type.value
        if self.metadata_type is not None:
            data["metadataType"] = self.metadata_type
        if self.metadata_category is not None:
            data["metadataCategory"] = self.metadata_category
        return data


@dataclass
class MappingSession:
    """Aggregate root for one legacy upload and its proposed mappings."""

    name: str
    legacy_data: List[LegacyEntity] = field(default_factory=list)
    mappings: List[HeraMapping] = field(default_factory=list)
    status: SessionStatus = SessionStatus.DRAFT
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def update_mapping(self, index: int, **changes) -> HeraMapping:
        """
        Edit one mapping in place.

        Editing a validated session sends it back to draft; approved and
        migrated sessions are read-only.

        Raises:
            InvalidTransitionError: If the session can no longer be edited
            IndexError: If index is out of range
        """
        if self.status in (SessionStatus.APPROVED, SessionStatus.MIGRATED):
            raise InvalidTransitionError(
                f"Session {self.id} is {self.status.value}; mappings are read-only"
            )

        updated = self.mappings[index].with_updates(**changes)
        self.mappings[index] = updated
        self.status = SessionStatus.DRAFT
        self._touch()
        return updated

    def advance(self, target: SessionStatus) -> None:
        """
        Move the session to the next status.

        Raises:
            InvalidTransitionError: If target is not the immediate successor
        """
        target = SessionStatus(target)
        current = _STATUS_ORDER.index(self.status)
        if _STATUS_ORDER.index(target) != current + 1:
            raise InvalidTransitionError(
                f"Cannot move session from {self.status.value} to {target.value}"
            )
        self.status = target
        self._touch()

    def mappings_for_table(self, table: HeraTable) -> List[HeraMapping]:
        return [m for m in self.mappings if m.hera_table == table]

    def summary(self) -> Dict[str, Any]:
        """Per-table mapping counts and confidence overview."""
        per_table = {table.value: len(self.mappings_for_table(table)) for table in HeraTable}
        confidences = [m.confidence for m in self.mappings]
        return {
            "entities": len(self.legacy_data),
            "fields": sum(len(e.fields) for e in self.legacy_data),
            "mappings": len(self.mappings),
            "per_table": per_table,
            "high_confidence": len([c for c in confidences if c >= 0.9]),
            "average_confidence": round(sum(confidences) / len(confidences), 4) if confidences else 0.0,
        }

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "legacyData": [entity.to_dict() for entity in self.legacy_data],
            "mappings": [m.to_dict() for m in self.mappings],
        }
