"""
Structure Analyzer - Infers entity/field structure from raw legacy data.

Supports:
- Flat arrays of records (one entity)
- Keyed objects whose values are arrays of records (one entity per key)
- Type inference from raw values (text, number, boolean, date, json)
- Required-field detection across the full dataset

Nested values are typed json and are not decomposed further.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from hera_mapper.schema.models import LegacyDataset, LegacyEntity, LegacyField, LegacyFieldType

logger = logging.getLogger(__name__)

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
SLASH_DATE_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}")


def _is_numeric_string(value: str) -> bool:
    text = value.strip()
    if not text or "_" in text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    # float() accepts digit separators and these spellings, a legacy value spelled like this is text
    return text.lower() not in ("nan", "inf", "-inf", "+inf", "infinity", "-infinity", "+infinity")


def infer_field_type(value: Any) -> LegacyFieldType:
    """
    Infer the type of a single raw value.

    bool is checked before numbers because it is an int subclass.
    """
    if isinstance(value, bool):
        return LegacyFieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return LegacyFieldType.NUMBER
    if isinstance(value, (dict, list)):
        return LegacyFieldType.JSON
    if isinstance(value, str):
        if ISO_DATE_PATTERN.match(value) or SLASH_DATE_PATTERN.match(value):
            return LegacyFieldType.DATE
        if _is_numeric_string(value):
            return LegacyFieldType.NUMBER
    return LegacyFieldType.TEXT


class StructureAnalyzer:
    """Analyzes parsed legacy content and extracts LegacyEntity definitions"""

    SAMPLE_SIZE = 5

    # Labels for the two input shapes
    ARRAY_ENTITY_TYPE = "data_records"
    COLLECTION_ENTITY_TYPE = "data_collection"

    def analyze(self, data: Any, source_name: str = "legacy_items") -> List[LegacyEntity]:
        """
        Analyze raw parsed content.

        Args:
            data: A list of flat records, or a dict whose values are lists of records
            source_name: Entity name used when data is a flat list

        Returns:
            Ordered list of LegacyEntity
        """
        entities: List[LegacyEntity] = []

        if isinstance(data, list):
            entity = self._build_entity(source_name, self.ARRAY_ENTITY_TYPE, data)
            if entity:
                entities.append(entity)
        elif isinstance(data, dict):
            for key, value in data.items():
                if not isinstance(value, list):
                    logger.debug(f"Skipping key '{key}': not a record collection")
                    continue
                entity = self._build_entity(key, self.COLLECTION_ENTITY_TYPE, value)
                if entity:
                    entities.append(entity)
        else:
            logger.warning(f"Unsupported legacy data shape: {type(data).__name__}")

        logger.info(
            f"Analyzed {len(entities)} entities with "
            f"{sum(len(e.fields) for e in entities)} fields"
        )
        return entities

    def analyze_dataset(
        self,
        data: Any,
        source_name: str = "legacy_items",
        source_format: str = "json",
    ) -> LegacyDataset:
        """Analyze data and wrap the result with record counts."""
        entities = self.analyze(data, source_name)

        if isinstance(data, list):
            total = len(data)
        elif isinstance(data, dict):
            total = sum(len(v) for v in data.values() if isinstance(v, list))
        else:
            total = 0

        return LegacyDataset(
            source_name=source_name,
            source_format=source_format,
            entities=entities,
            total_records=total,
        )

    def _build_entity(
        self,
        name: str,
        entity_type: str,
        records: List[Any],
    ) -> Optional[LegacyEntity]:
        """Build one entity from its records, using the first one as field template"""
        if not records:
            return None

        template = records[0]
        if not isinstance(template, dict):
            logger.warning(f"Skipping '{name}': records are not objects")
            return None

        fields = [
            LegacyField(
                name=key,
                type=infer_field_type(value),
                sample_value=value,
                is_required=self._is_required(key, records),
            )
            for key, value in template.items()
        ]

        return LegacyEntity(
            name=name,
            type=entity_type,
            fields=fields,
            sample_data=list(records[: self.SAMPLE_SIZE]),
        )

    @staticmethod
    def _is_required(key: str, records: List[Any]) -> bool:
        """A field is required when every record carries a non-null value for it"""
        return all(isinstance(r, dict) and r.get(key) is not None for r in records)
