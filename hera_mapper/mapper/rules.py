"""
Mapping rules - ordered decision list from legacy field to universal schema.

Each rule is a (predicate, build) pair of pure functions over a FieldContext.
Rules are evaluated in list order and the first match wins; the last rule
always matches, so every field gets exactly one mapping.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from hera_mapper.mapper.mapping import DynamicFieldType, HeraMapping, MappingType
from hera_mapper.schema.models import HeraTable, LegacyFieldType

TENANT_FIELD = "organization_id"

# Plural/collection names with a known entity type
ENTITY_TYPE_MAP: Dict[str, str] = {
    "restaurants": "restaurant",
    "addresses": "address",
    "menu_sections": "menu_section",
    "menu_items": "menu_item",
    "customers": "customer",
    "orders": "order",
    "products": "product",
    "data_collection": "entity",
    "legacy_items": "entity",
    "data_records": "entity",
}

SIMPLE_ATTRIBUTE_KEYWORDS = (
    "available", "enabled", "quantity", "count", "weight", "size", "dimension",
)
CODE_TOKENS = ("code", "sku", "ref", "reference", "barcode")
RICH_TEXT_NAMES = ("description", "details", "ingredients", "content")
CONFIG_KEYWORDS = ("settings", "config", "preferences")
CONTACT_NAMES = ("phone", "email", "rating")
LOCATION_KEYWORDS = ("street", "address", "city", "state", "country", "postal")
PRICING_NAMES = ("price", "cost", "amount")
ACTIVE_KEYWORDS = ("active", "enabled")
DATE_HINTS = ("date", "time", "created", "updated")


def entity_type_from_name(entity_name: str) -> str:
    """Derive the universal entity type from a legacy collection name."""
    if entity_name in ENTITY_TYPE_MAP:
        return ENTITY_TYPE_MAP[entity_name]
    return entity_name[:-1] if entity_name.endswith("s") else entity_name


def naming_field(entity_type: str, kind: str) -> str:
    """Universal naming convention: <entity_type>_name / <entity_type>_code."""
    return f"{entity_type}_{kind}"


def infer_dynamic_field_type(original_type: str, field_name: str) -> DynamicFieldType:
    """Pick the core_dynamic_data value type from the inferred type and name hints."""
    name = field_name.lower()
    original = str(original_type or "").lower()

    if original == "number" or any(k in name for k in ("price", "cost", "amount", "rating", "count")):
        return DynamicFieldType.NUMBER
    if original == "boolean" or any(k in name for k in ("delivery", "available", "active", "enabled")):
        return DynamicFieldType.BOOLEAN
    if original == "date" or any(k in name for k in DATE_HINTS):
        return DynamicFieldType.DATE
    if original == "json" or any(k in name for k in ("settings", "config", "preferences", "metadata")):
        return DynamicFieldType.JSON
    return DynamicFieldType.TEXT


@dataclass(frozen=True)
class FieldContext:
    """Everything a rule may look at for one legacy field."""

    field_name: str
    field_type: LegacyFieldType
    entity_name: str

    @property
    def name(self) -> str:
        return self.field_name.lower()

    @property
    def tokens(self) -> List[str]:
        return self.name.split("_")

    @property
    def entity_type(self) -> str:
        return entity_type_from_name(self.entity_name)

    @property
    def legacy_field(self) -> str:
        return f"{self.entity_name}.{self.field_name}"

    @property
    def dynamic_type(self) -> DynamicFieldType:
        return infer_dynamic_field_type(self.field_type.value, self.field_name)


@dataclass(frozen=True)
class MappingRule:
    """One entry of the decision list."""

    name: str
    predicate: Callable[[FieldContext], bool]
    build: Callable[[FieldContext], HeraMapping]


# ----------------------------------------------------------------------------
# Predicates
# ----------------------------------------------------------------------------


def _is_primary_id(ctx: FieldContext) -> bool:
    if ctx.name == "id":
        return True
    if not ctx.name.endswith("_id") or ctx.name == TENANT_FIELD:
        return False
    prefix = ctx.name[: -len("_id")]
    entity_type = ctx.entity_type
    return bool(prefix) and (entity_type == prefix or entity_type.endswith(f"_{prefix}"))


def _is_foreign_key(ctx: FieldContext) -> bool:
    return ctx.name.endswith("_id") and ctx.name != TENANT_FIELD and not _is_primary_id(ctx)


def _is_code(ctx: FieldContext) -> bool:
    return "code" in ctx.name or "sku" in ctx.name or any(t in CODE_TOKENS for t in ctx.tokens)


def _is_simple_attribute(ctx: FieldContext) -> bool:
    return ctx.name == "delivery" or any(k in ctx.name for k in SIMPLE_ATTRIBUTE_KEYWORDS)


def _is_config_or_contact(ctx: FieldContext) -> bool:
    return any(k in ctx.name for k in CONFIG_KEYWORDS) or ctx.name in CONTACT_NAMES


def _is_location(ctx: FieldContext) -> bool:
    return any(k in ctx.name for k in LOCATION_KEYWORDS) or ctx.name == "district"


def _is_created_timestamp(ctx: FieldContext) -> bool:
    return _looks_like_date(ctx) and ("created" in ctx.name or "added" in ctx.name)


def _is_updated_timestamp(ctx: FieldContext) -> bool:
    return _looks_like_date(ctx) and ("updated" in ctx.name or "modified" in ctx.name)


def _looks_like_date(ctx: FieldContext) -> bool:
    return ctx.field_type == LegacyFieldType.DATE or any(k in ctx.name for k in DATE_HINTS)


def _is_complex(ctx: FieldContext) -> bool:
    return (
        ctx.field_type == LegacyFieldType.JSON
        or len(ctx.name) > 20
        or "complex" in ctx.name
        or "info" in ctx.name
    )


# ----------------------------------------------------------------------------
# Builders
# ----------------------------------------------------------------------------


def _tenant(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.ENTITIES,
        hera_field=TENANT_FIELD,
        mapping_type=MappingType.DIRECT,
        confidence=1.0,
        notes="Organization isolation: mandatory tenant scope for every universal record",
        entity_type=ctx.entity_type,
    )


def _primary_id(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.ENTITIES,
        hera_field="id",
        mapping_type=MappingType.TRANSFORM,
        transform_rule="Generate new surrogate id; retain legacy id in dynamic attributes for traceability",
        confidence=0.98,
        notes="Primary entity id: a new universal id is generated, the legacy id is kept in core_dynamic_data",
        entity_type=ctx.entity_type,
    )


def _foreign_key(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.METADATA,
        hera_field="metadata_value",
        mapping_type=MappingType.METADATA,
        transform_rule=(
            f'Store legacy reference for manual joins: {{"legacy_{ctx.name}": "value", '
            f'"join_pattern": "{TENANT_FIELD}"}} - manual join by tenant scope only'
        ),
        confidence=0.95,
        notes="No foreign keys: legacy reference kept in metadata, relationships resolved "
              f"by {TENANT_FIELD} at query time",
        metadata_type="relationship_context",
        metadata_category="legacy_references",
    )


def _entity_name(ctx: FieldContext) -> HeraMapping:
    target = naming_field(ctx.entity_type, "name")
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.ENTITIES,
        hera_field=target,
        mapping_type=MappingType.DIRECT,
        confidence=0.98,
        notes=f"Universal naming: {target} follows the <entity_type>_name convention",
        entity_type=ctx.entity_type,
    )


def _entity_code(ctx: FieldContext) -> HeraMapping:
    target = naming_field(ctx.entity_type, "code")
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.ENTITIES,
        hera_field=target,
        mapping_type=MappingType.TRANSFORM,
        transform_rule="Generate entity code following the universal naming convention",
        confidence=0.95,
        notes=f"Universal naming: {target} follows the <entity_type>_code convention",
        entity_type=ctx.entity_type,
    )


def _dynamic(confidence: float, notes: str) -> Callable[[FieldContext], HeraMapping]:
    def build(ctx: FieldContext) -> HeraMapping:
        field_type = ctx.dynamic_type
        return HeraMapping(
            legacy_field=ctx.legacy_field,
            hera_table=HeraTable.DYNAMIC_DATA,
            hera_field="field_value",
            mapping_type=MappingType.DYNAMIC,
            transform_rule=f'Store as dynamic field: field_name="{ctx.name}", field_type="{field_type.value}"',
            confidence=confidence,
            notes=notes,
            field_type=field_type,
        )
    return build


def _rich_text(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.METADATA,
        hera_field="metadata_value",
        mapping_type=MappingType.METADATA,
        transform_rule=f'Store rich content in metadata: {{"{ctx.name}": "value", '
                       f'"content_type": "text", "searchable": true}}',
        confidence=0.90,
        notes="Rich text content kept in metadata for search and analysis",
        metadata_type="content_data",
        metadata_category="descriptive_text",
    )


def _config_or_contact(ctx: FieldContext) -> HeraMapping:
    if "contact" in ctx.name or ctx.name in ("phone", "email"):
        metadata_type = "contact_info"
    elif ctx.name == "rating":
        metadata_type = "business_attributes"
    else:
        metadata_type = "configuration"

    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.METADATA,
        hera_field="metadata_value",
        mapping_type=MappingType.METADATA,
        transform_rule=f'Store in metadata: {{"{ctx.name}": "value", "type": "{ctx.dynamic_type.value}"}}',
        confidence=0.90,
        notes="Structured metadata for contact details, ratings and configuration",
        metadata_type=metadata_type,
        metadata_category="structured_data",
    )


def _location(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.METADATA,
        hera_field="metadata_value",
        mapping_type=MappingType.METADATA,
        transform_rule=f'Store location in metadata: {{"{ctx.name}": "value", "geo_type": "location_component"}}',
        confidence=0.92,
        notes="Location component kept as structured geographical metadata",
        metadata_type="location_data",
        metadata_category="geographical_info",
    )


def _pricing(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.METADATA,
        hera_field="metadata_value",
        mapping_type=MappingType.METADATA,
        transform_rule=f'Store pricing in metadata: {{"{ctx.name}": "value", "currency": "auto_detect"}}',
        confidence=0.95,
        notes="Financial value in metadata; currency is auto-detected during migration",
        metadata_type="pricing_info",
        metadata_category="financial_data",
    )


def _active_flag(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.ENTITIES,
        hera_field="is_active",
        mapping_type=MappingType.TRANSFORM,
        transform_rule="Convert to boolean: active/enabled/true -> true",
        confidence=0.95,
        notes="Standard active status column",
        entity_type=ctx.entity_type,
    )


def _timestamp(column: str, label: str) -> Callable[[FieldContext], HeraMapping]:
    def build(ctx: FieldContext) -> HeraMapping:
        return HeraMapping(
            legacy_field=ctx.legacy_field,
            hera_table=HeraTable.ENTITIES,
            hera_field=column,
            mapping_type=MappingType.TRANSFORM,
            transform_rule="Convert to ISO 8601 timestamp",
            confidence=0.95,
            notes=f"Standard {label} timestamp",
            entity_type=ctx.entity_type,
        )
    return build


def _complex_attribute(ctx: FieldContext) -> HeraMapping:
    return HeraMapping(
        legacy_field=ctx.legacy_field,
        hera_table=HeraTable.METADATA,
        hera_field="metadata_value",
        mapping_type=MappingType.METADATA,
        transform_rule=f'Store complex attribute in metadata: {{"{ctx.name}": "value", "auto_detected": true}}',
        confidence=0.75,
        notes="Complex attribute kept as structured metadata",
        metadata_type="custom_attributes",
        metadata_category="auto_detected",
    )


MAPPING_RULES: List[MappingRule] = [
    MappingRule("tenant_scope", lambda ctx: ctx.name == TENANT_FIELD, _tenant),
    MappingRule("primary_id", _is_primary_id, _primary_id),
    MappingRule("foreign_key_reference", _is_foreign_key, _foreign_key),
    MappingRule("entity_name", lambda ctx: ctx.name in ("name", "title", "label"), _entity_name),
    MappingRule("entity_code", _is_code, _entity_code),
    MappingRule(
        "simple_attribute",
        _is_simple_attribute,
        _dynamic(0.95, "Simple scalar attribute stored as a typed dynamic field"),
    ),
    MappingRule("rich_text", lambda ctx: ctx.name in RICH_TEXT_NAMES, _rich_text),
    MappingRule("contact_or_configuration", _is_config_or_contact, _config_or_contact),
    MappingRule("location", _is_location, _location),
    MappingRule("pricing", lambda ctx: ctx.name in PRICING_NAMES, _pricing),
    MappingRule("active_flag", lambda ctx: any(k in ctx.name for k in ACTIVE_KEYWORDS), _active_flag),
    MappingRule("created_timestamp", _is_created_timestamp, _timestamp("created_at", "creation")),
    MappingRule("updated_timestamp", _is_updated_timestamp, _timestamp("updated_at", "update")),
    MappingRule("complex_attribute", _is_complex, _complex_attribute),
    MappingRule(
        "dynamic_default",
        lambda ctx: True,
        _dynamic(0.70, "Simple attribute stored in dynamic data for flexibility"),
    ),
]


def match_rule(ctx: FieldContext, rules: Optional[List[MappingRule]] = None) -> MappingRule:
    """Return the first rule whose predicate accepts ctx."""
    for rule in rules or MAPPING_RULES:
        if rule.predicate(ctx):
            return rule
    raise LookupError(f"No mapping rule matched {ctx.legacy_field}")
