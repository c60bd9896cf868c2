"""Transformer registry: value conversions applied when previewing a migration."""
import json
from datetime import date, datetime, timezone
from typing import Any, Optional

from hera_mapper.mapper.mapping import DynamicFieldType, HeraMapping, MappingType
from hera_mapper.mapper.rules import TENANT_FIELD
from hera_mapper.schema.models import HeraTable

TRUE_STRINGS = {"true", "1", "yes", "y", "active", "enabled", "on"}
FALSE_STRINGS = {"false", "0", "no", "n", "inactive", "disabled", "off", ""}

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%d/%m/%Y", "%m/%d/%Y"]


class TransformerRegistry:
    """Registry of available transformers."""

    def __init__(self):
        """Initialize registry."""
        self.transformers = {
            "NONE": lambda x, **kw: x,
            "TRIM": lambda x, **kw: str(x).strip() if x else x,
            "UPPERCASE": lambda x, **kw: str(x).strip().upper() if x else x,
            "TO_BOOLEAN": self._to_boolean,
            "TO_NUMBER": self._to_number,
            "TO_ISO_TIMESTAMP": self._to_iso_timestamp,
            "TO_JSON": self._to_json,
            "LEGACY_REFERENCE": self._legacy_reference,
        }

    def get(self, name: str):
        """Get transformer by name."""
        return self.transformers.get(name, self.transformers["NONE"])

    def transform(self, value: Any, transformer_name: str, **config) -> Any:
        """Apply transformation."""
        transformer = self.get(transformer_name)
        return transformer(value, **config)

    @staticmethod
    def transformer_for(mapping: HeraMapping) -> str:
        """Name of the transformer matching a mapping's target."""
        if mapping.hera_field == "is_active":
            return "TO_BOOLEAN"
        if mapping.hera_field in ("created_at", "updated_at"):
            return "TO_ISO_TIMESTAMP"
        if mapping.hera_table == HeraTable.ENTITIES and mapping.hera_field.endswith("_code"):
            return "UPPERCASE"
        if mapping.metadata_type == "relationship_context":
            return "LEGACY_REFERENCE"
        if mapping.metadata_type == "pricing_info":
            return "TO_NUMBER"
        if mapping.mapping_type == MappingType.DYNAMIC:
            return {
                DynamicFieldType.BOOLEAN: "TO_BOOLEAN",
                DynamicFieldType.NUMBER: "TO_NUMBER",
                DynamicFieldType.DATE: "TO_ISO_TIMESTAMP",
                DynamicFieldType.JSON: "TO_JSON",
            }.get(mapping.field_type, "TRIM")
        if mapping.hera_field == TENANT_FIELD:
            return "TRIM"
        return "NONE"

    @staticmethod
    def _to_boolean(value: Any, **config) -> Optional[bool]:
        """Convert to boolean: active/enabled/true -> true."""
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        text = str(value).strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        return bool(text)

    @staticmethod
    def _to_number(value: Any, **config) -> Any:
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value
        text = str(value).strip().replace(",", "")
        try:
            number = float(text)
        except ValueError:
            return value
        return int(number) if number.is_integer() and "." not in text else number

    @staticmethod
    def _to_iso_timestamp(value: Any, **config) -> Any:
        """Convert to ISO 8601; unparseable values are returned unchanged."""
        if value is None:
            return value
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, date):
            moment = datetime(value.year, value.month, value.day)
        else:
            text = str(value).strip()
            moment = None
            try:
                moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                for fmt in config.get("formats", DATE_FORMATS):
                    try:
                        moment = datetime.strptime(text, fmt)
                        break
                    except ValueError:
                        continue
            if moment is None:
                return value

        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.isoformat()

    @staticmethod
    def _to_json(value: Any, **config) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    @staticmethod
    def _legacy_reference(value: Any, **config) -> Any:
        """Wrap a legacy key as a manual-join reference payload."""
        if value is None:
            return None
        field_name = config.get("field_name", "reference")
        return {f"legacy_{field_name}": value, "join_pattern": TENANT_FIELD}
