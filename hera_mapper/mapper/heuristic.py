"""Heuristic mapping engine: proposes universal-schema mappings for legacy fields."""
import logging
from typing import List, Optional

from hera_mapper.mapper.domain import BusinessDomain
from hera_mapper.mapper.mapping import HeraMapping, MappingType
from hera_mapper.mapper.rules import MAPPING_RULES, FieldContext, MappingRule, match_rule
from hera_mapper.schema.models import LegacyEntity, LegacyField, LegacyFieldType

logger = logging.getLogger(__name__)


class HeuristicMapper:
    """Auto-map legacy entities to the universal schema using the rule list."""

    def __init__(
        self,
        rules: Optional[List[MappingRule]] = None,
        domain: Optional[BusinessDomain] = None,
    ):
        """
        Initialize mapper.

        Args:
            rules: Ordered decision list (defaults to MAPPING_RULES)
            domain: Optional classification of the dataset; only annotates
                    fallback mappings, never changes a target or confidence
        """
        self.rules = rules or MAPPING_RULES
        self.domain = domain

    def suggest_mappings(self, entities: List[LegacyEntity]) -> List[HeraMapping]:
        """Generate exactly one mapping per legacy field, in entity/field order."""
        mappings = [
            self.suggest_mapping(legacy_field, entity)
            for entity in entities
            for legacy_field in entity.fields
        ]
        logger.info(f"Generated {len(mappings)} mappings for {len(entities)} entities")
        return mappings

    def suggest_mapping(self, legacy_field: LegacyField, entity: LegacyEntity) -> HeraMapping:
        """Map a single field of an entity."""
        return self.map_field(legacy_field.name, legacy_field.type, entity.name)

    def map_field(
        self,
        field_name: str,
        field_type: LegacyFieldType,
        entity_name: str,
    ) -> HeraMapping:
        """Apply the first matching rule to a field name/type pair."""
        ctx = FieldContext(
            field_name=field_name,
            field_type=LegacyFieldType(field_type),
            entity_name=entity_name,
        )
        rule = match_rule(ctx, self.rules)
        mapping = rule.build(ctx)

        if self.domain and self.domain.confidence > 0 and mapping.mapping_type == MappingType.DYNAMIC \
                and mapping.confidence < 0.9:
            mapping = mapping.with_updates(
                notes=f"{mapping.notes} (dataset classified as {self.domain.name})"
            )

        logger.debug(f"{ctx.legacy_field} -> {mapping.hera_table.value}.{mapping.hera_field} via {rule.name}")
        return mapping

    def rule_for(
        self,
        field_name: str,
        field_type: LegacyFieldType = LegacyFieldType.TEXT,
        entity_name: str = "legacy_items",
    ) -> str:
        """Name of the rule that decides a field."""
        ctx = FieldContext(field_name, LegacyFieldType(field_type), entity_name)
        return match_rule(ctx, self.rules).name
