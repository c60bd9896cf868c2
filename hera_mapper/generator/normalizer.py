"""Validation and normalization of AI-returned schemas."""
import logging
from typing import Any, Dict, List

from hera_mapper.errors import ValidationGapError
from hera_mapper.generator.models import GeneratedField, GeneratedSchema, utc_now_iso
from hera_mapper.generator.rule_based import SYSTEM_FIELDS, RuleBasedSchemaGenerator, system_field
from hera_mapper.mapper.domain import BusinessDomain, clamp_confidence, general_domain

logger = logging.getLogger(__name__)

ENVELOPE_FIELDS = [
    "entityType", "name", "domain", "fields", "metadata", "confidence",
    "suggestions", "validationRules", "businessRules", "auditTrail",
]

AI_ADVISORY_INSIGHT = {
    "type": "performance",
    "title": "AI-Generated Schema",
    "description": "This schema was generated using AI analysis of the business requirement.",
    "priority": "medium",
    "recommendation": "Review and customize fields based on specific business requirements.",
}

DEFAULT_AI_CONFIDENCE = 0.8


def find_gaps(raw: Dict[str, Any]) -> List[str]:
    """Envelope fields missing from a raw AI response."""
    present = dict(raw)
    if "name" not in present and "entityName" in present:
        present["name"] = present["entityName"]
    return [key for key in ENVELOPE_FIELDS if present.get(key) in (None, "")]


def _list_of(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def ensure_system_fields(fields: List[GeneratedField]) -> List[GeneratedField]:
    """Put id, created_at and updated_at at the front when missing."""
    names = {f.name for f in fields}
    missing = [system_field(spec) for spec in SYSTEM_FIELDS if spec["name"] not in names]
    return missing + fields


class SchemaNormalizer:
    """Fills structural defaults into AI responses and marks them AI generated"""

    def __init__(self, rule_based: RuleBasedSchemaGenerator = None):
        self.rule_based = rule_based or RuleBasedSchemaGenerator()

    def normalize(self, raw: Dict[str, Any], requirement: str) -> GeneratedSchema:
        """
        Validate an AI response and fill any missing envelope parts.

        Args:
            raw: Parsed JSON returned by an AI backend
            requirement: Original (non-augmented) requirement text

        Returns:
            GeneratedSchema; never raises for missing parts
        """
        gaps = find_gaps(raw)
        if gaps:
            # Recovered here by filling defaults
            logger.debug(f"Normalizing AI schema: {ValidationGapError(gaps)}")

        entity_type = str(raw.get("entityType") or "custom_entity")
        name = raw.get("entityName") or raw.get("name") or self.rule_based.entity_name(requirement)

        domain = self._domain(raw.get("domain"))

        fields = [
            GeneratedField.from_dict(f)
            for f in _list_of(raw.get("fields"))
            if isinstance(f, dict) and f.get("name")
        ]
        fields = ensure_system_fields(fields)

        metadata = raw.get("metadata")
        if not isinstance(metadata, dict):
            metadata = self.rule_based.generate_metadata(requirement, domain)
        else:
            metadata = dict(metadata)
        insights = metadata.get("ai_insights")
        metadata["ai_insights"] = list(insights) if isinstance(insights, list) else []
        metadata["ai_insights"].append(dict(AI_ADVISORY_INSIGHT))

        audit_trail = raw.get("auditTrail")
        if not isinstance(audit_trail, dict):
            audit_trail = {
                "generated_at": utc_now_iso(),
                "requirement": requirement,
                "analysis": {"originalText": requirement, "entityType": entity_type, "complexity": 0.7},
            }

        confidence = raw.get("confidence")
        rules = raw.get("validationRules")
        return GeneratedSchema(
            entity_type=entity_type,
            name=str(name),
            domain=domain,
            fields=fields,
            metadata=metadata,
            confidence=clamp_confidence(confidence if confidence is not None else DEFAULT_AI_CONFIDENCE),
            suggestions=[str(s) for s in _list_of(raw.get("suggestions"))],
            validation_rules=dict(rules) if isinstance(rules, dict) else {},
            business_rules=[str(r) for r in _list_of(raw.get("businessRules"))],
            audit_trail=audit_trail,
        )

    @staticmethod
    def _domain(value: Any) -> BusinessDomain:
        if isinstance(value, dict) and value.get("name"):
            return BusinessDomain.from_dict(value)
        if isinstance(value, str) and value:
            return BusinessDomain(name=value, confidence=0.5)
        return general_domain()
