"""
Preview Builder - Shows how legacy records would land in the universal tables

Integrates:
- HeraMapping: Field-level targets chosen by the mapping rules
- TransformerRegistry: Value conversions per target
- Tenant scope: Every preview row carries organization_id

Nothing is persisted; the output is for review only.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hera_mapper.mapper.mapping import HeraMapping, MappingSession, MappingType
from hera_mapper.mapper.rules import TENANT_FIELD, entity_type_from_name
from hera_mapper.schema.models import HeraTable, LegacyEntity
from hera_mapper.transformer.registry import TransformerRegistry

logger = logging.getLogger(__name__)

PREVIEW_ORGANIZATION = "<organization_id>"


@dataclass
class RecordPreview:
    """Universal rows produced from one legacy record"""
    entity: Dict[str, Any]
    dynamic_data: List[Dict[str, Any]] = field(default_factory=list)
    metadata: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            HeraTable.ENTITIES.value: self.entity,
            HeraTable.DYNAMIC_DATA.value: self.dynamic_data,
            HeraTable.METADATA.value: self.metadata,
        }


class PreviewBuilder:
    """
    Builds migration previews from a mapping session

    Usage:
    ```python
    builder = PreviewBuilder(organization_id="org-1")
    previews = builder.build_session(session, limit=3)
    # Returns: {"menu_items": [RecordPreview, ...], ...}
    ```
    """

    def __init__(
        self,
        organization_id: Optional[str] = None,
        transformers: Optional[TransformerRegistry] = None,
    ):
        """
        Initialize PreviewBuilder

        Args:
            organization_id: Tenant scope written when the legacy data has none
            transformers: Value transformer registry
        """
        self.organization_id = organization_id or PREVIEW_ORGANIZATION
        self.transformers = transformers or TransformerRegistry()

    def build(
        self,
        entity: LegacyEntity,
        mappings: List[HeraMapping],
        record: Dict[str, Any],
        index: int = 0,
    ) -> RecordPreview:
        """
        Apply an entity's mappings to one record

        Args:
            entity: Legacy entity the record belongs to
            mappings: Mappings of that entity's fields
            record: Legacy record
            index: Position of the record, used for the preview id

        Returns:
            RecordPreview
        """
        entity_type = entity_type_from_name(entity.name)
        preview = RecordPreview(entity={
            "id": f"preview-{entity_type}-{index + 1}",
            TENANT_FIELD: self.organization_id,
            "entity_type": entity_type,
        })

        for mapping in mappings:
            if mapping.mapping_type == MappingType.IGNORE:
                continue

            raw = record.get(mapping.field_name)
            transformer = self.transformers.transformer_for(mapping)
            value = self.transformers.transform(raw, transformer, field_name=mapping.field_name)

            if mapping.hera_table == HeraTable.ENTITIES:
                if mapping.hera_field == "id":
                    # New surrogate id; the legacy one is kept as a dynamic field
                    preview.dynamic_data.append({
                        "field_name": f"legacy_{mapping.field_name}",
                        "field_type": "text",
                        "field_value": None if raw is None else str(raw),
                    })
                elif value is not None:
                    preview.entity[mapping.hera_field] = value
            elif mapping.hera_table == HeraTable.DYNAMIC_DATA:
                if value is None:
                    continue
                preview.dynamic_data.append({
                    "field_name": mapping.field_name,
                    "field_type": mapping.field_type.value if mapping.field_type else "text",
                    "field_value": value,
                })
            elif mapping.hera_table == HeraTable.METADATA:
                if value is None:
                    continue
                payload = value if isinstance(value, dict) else {mapping.field_name: value}
                preview.metadata.append({
                    "metadata_type": mapping.metadata_type,
                    "metadata_category": mapping.metadata_category,
                    "metadata_value": payload,
                })

        return preview

    def build_entity(
        self,
        entity: LegacyEntity,
        mappings: List[HeraMapping],
        limit: Optional[int] = None,
    ) -> List[RecordPreview]:
        """Preview every sample record of an entity (up to limit)"""
        entity_mappings = [m for m in mappings if m.entity_name == entity.name]
        records = entity.sample_data[:limit] if limit else entity.sample_data

        previews = []
        for index, record in enumerate(records):
            try:
                previews.append(self.build(entity, entity_mappings, record, index))
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Error previewing {entity.name} record {index}: {e}")
                # Continue with next record
                continue

        logger.info(f"Built {len(previews)} previews for {entity.name}")
        return previews

    def build_session(
        self,
        session: MappingSession,
        limit: Optional[int] = None,
    ) -> Dict[str, List[RecordPreview]]:
        """Preview all entities of a session, keyed by entity name"""
        return {
            entity.name: self.build_entity(entity, session.mappings, limit)
            for entity in session.legacy_data
        }
