"""JSON exporter."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from hera_mapper.config import app_config
from hera_mapper.mapper.mapping import HeraMapping, MappingSession, MappingType
from hera_mapper.mapper.rules import TENANT_FIELD, entity_type_from_name
from hera_mapper.schema.models import HERA_SCHEMA, HeraTable

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "hera-data-mapping.json"


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class JsonExporter:
    """Export mapping sessions to JSON and text artifacts."""

    def build_config(self, session: MappingSession) -> Dict[str, Any]:
        """Mapping configuration document for a session."""
        return {
            "session": {
                "id": session.id,
                "name": session.name,
                "status": session.status.value,
                "createdAt": session.created_at.isoformat(),
                "updatedAt": session.updated_at.isoformat(),
                "summary": session.summary(),
            },
            "legacyData": [entity.to_dict() for entity in session.legacy_data],
            "mappings": [m.to_dict() for m in session.mappings],
            "heraSchema": HERA_SCHEMA,
            "exportDate": datetime.now(timezone.utc).isoformat(),
        }

    def export(self, session: MappingSession, output_file: Optional[Path] = None) -> Path:
        """
        Export to JSON file.

        Args:
            session: Session to export
            output_file: Target path (defaults to <output_dir>/hera-data-mapping.json)

        Returns:
            Path written

        Raises:
            TypeError: If the session holds values JSON cannot represent
        """
        output_file = Path(output_file) if output_file else Path(app_config.output_dir) / DEFAULT_FILE_NAME
        data = self.build_config(session)

        # Serialize before touching the file so a failure leaves nothing behind
        content = json.dumps(data, indent=2, ensure_ascii=False)

        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(content)

        logger.info(f"Exported {len(session.mappings)} mappings to {output_file}")
        return output_file

    def export_sql_script(self, session: MappingSession) -> str:
        """Parameterized INSERT templates for the universal tables, one block per entity."""
        lines = [
            f"-- Migration script for session '{session.name}' ({session.id})",
            f"-- Generated {datetime.now(timezone.utc).isoformat()}",
            "-- Bind :organization_id and :entity_id per record; no foreign keys are created.",
            "",
        ]

        for entity in session.legacy_data:
            mappings = [m for m in session.mappings if m.entity_name == entity.name]
            lines.extend(self._entity_sql(entity.name, mappings))
            lines.append("")

        return "\n".join(lines)

    def _entity_sql(self, entity_name: str, mappings: List[HeraMapping]) -> List[str]:
        entity_type = entity_type_from_name(entity_name)
        lines = [f"-- {entity_name} -> entity_type '{entity_type}'"]

        columns = ["id", TENANT_FIELD, "entity_type"]
        values = ["gen_random_uuid()", ":organization_id", _sql_literal(entity_type)]
        for mapping in mappings:
            if mapping.hera_table != HeraTable.ENTITIES or mapping.hera_field in columns:
                continue
            columns.append(mapping.hera_field)
            values.append(f":{mapping.field_name}")
        lines.append(
            f"INSERT INTO {HeraTable.ENTITIES.value} ({', '.join(columns)}) "
            f"VALUES ({', '.join(values)});"
        )

        for mapping in mappings:
            if mapping.hera_table == HeraTable.ENTITIES and mapping.hera_field == "id":
                # Legacy primary key kept for traceability
                lines.append(self._dynamic_insert(f"legacy_{mapping.field_name}", "text", mapping.field_name))
            elif mapping.hera_table == HeraTable.DYNAMIC_DATA:
                field_type = mapping.field_type.value if mapping.field_type else "text"
                lines.append(self._dynamic_insert(mapping.field_name, field_type, mapping.field_name))
            elif mapping.hera_table == HeraTable.METADATA:
                lines.append(
                    f"INSERT INTO {HeraTable.METADATA.value} "
                    f"({TENANT_FIELD}, entity_id, metadata_type, metadata_category, metadata_value) "
                    f"VALUES (:organization_id, :entity_id, {_sql_literal(mapping.metadata_type or '')}, "
                    f"{_sql_literal(mapping.metadata_category or '')}, "
                    f"jsonb_build_object({_sql_literal(mapping.field_name)}, :{mapping.field_name}));"
                )
        return lines

    @staticmethod
    def _dynamic_insert(field_name: str, field_type: str, parameter: str) -> str:
        return (
            f"INSERT INTO {HeraTable.DYNAMIC_DATA.value} "
            f"({TENANT_FIELD}, entity_id, field_name, field_type, field_value) "
            f"VALUES (:organization_id, :entity_id, {_sql_literal(field_name)}, "
            f"{_sql_literal(field_type)}, :{parameter});"
        )

    def export_transform_rules(self, session: MappingSession) -> str:
        """Human-readable list of the transformations each mapping needs."""
        lines = [f"Transform rules for session '{session.name}'", ""]
        for mapping in session.mappings:
            if mapping.mapping_type == MappingType.IGNORE:
                lines.append(f"{mapping.legacy_field}: ignored")
                continue
            target = f"{mapping.hera_table.value}.{mapping.hera_field}"
            rule = mapping.transform_rule or "Copy value as is"
            lines.append(
                f"{mapping.legacy_field} -> {target} "
                f"[{mapping.mapping_type.value}, {mapping.confidence:.0%}]: {rule}"
            )
        return "\n".join(lines)
