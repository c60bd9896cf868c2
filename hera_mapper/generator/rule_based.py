"""
Rule-Based Schema Generator - Builds a GeneratedSchema from a business requirement.

Used as the final fallback when no AI backend produces a usable schema, and
directly when AI is disabled. Output is deterministic apart from timestamps:
- Requirement analysis (entities, actions, rules, complexity)
- Domain classification and domain common fields
- Fields extracted from the text by name patterns
- System fields (id, created_at, updated_at)
- Universal-schema mapping of every field via the mapping rule list
"""

import logging
import re
from typing import Any, Dict, List, Optional

from hera_mapper.generator.models import GeneratedField, GeneratedSchema, utc_now_iso
from hera_mapper.mapper.domain import BusinessDomain, DomainClassifier
from hera_mapper.mapper.heuristic import HeuristicMapper
from hera_mapper.schema.models import LegacyFieldType

logger = logging.getLogger(__name__)

GENERATOR_VERSION = "1.0.0"

# (pattern name, field type, regex, options)
FIELD_PATTERNS = [
    ("id", "text", re.compile(r"\b(id|identifier|code|number)\b", re.I), None),
    ("name", "text", re.compile(r"\b(name|title|label|designation)\b", re.I), None),
    ("email", "email", re.compile(r"\b(email|mail|e-mail)\b", re.I), None),
    ("phone", "phone", re.compile(r"\b(phone|mobile|contact|telephone)\b", re.I), None),
    ("address", "textarea", re.compile(r"\b(address|location|place)\b", re.I), None),
    ("website", "url", re.compile(r"\b(website|url|site|link)\b", re.I), None),
    ("currency", "currency", re.compile(
        r"\b(amount|price|cost|budget|salary|wage|fee|payment|revenue|expense|total|subtotal|tax|discount)\b",
        re.I), None),
    ("percentage", "percentage", re.compile(r"\b(rate|percent|percentage|commission|discount|tax_rate)\b", re.I),
     None),
    ("date", "date", re.compile(
        r"\b(date|day|birthday|deadline|due|start|end|created|updated|modified)\b", re.I), None),
    ("datetime", "datetime", re.compile(r"\b(datetime|timestamp|time|scheduled|appointment)\b", re.I), None),
    ("boolean", "boolean", re.compile(
        r"(\b(is|has|can|should)_|\b(active|enabled|disabled|complete|finished|approved|published|visible)\b)",
        re.I), None),
    ("description", "textarea", re.compile(
        r"\b(description|details|notes|comments|remarks|summary|content|body|message)\b", re.I), None),
    ("status", "select", re.compile(
        r"\b(status|state|stage|phase|condition|level|priority|type|category|classification)\b", re.I),
     ["active", "inactive", "pending", "completed", "cancelled", "draft", "published"]),
    ("quantity", "number", re.compile(
        r"\b(quantity|count|number|amount|size|weight|volume|capacity|stock|inventory)\b", re.I), None),
]

ENTITY_PATTERNS = [
    re.compile(r"\b(customer|client|user|person|individual)\b", re.I),
    re.compile(r"\b(product|item|good|service|offering)\b", re.I),
    re.compile(r"\b(order|purchase|sale|transaction)\b", re.I),
    re.compile(r"\b(invoice|bill|receipt|payment)\b", re.I),
    re.compile(r"\b(project|task|job|work)\b", re.I),
    re.compile(r"\b(employee|staff|worker|team)\b", re.I),
]

ACTION_PATTERNS = [
    re.compile(r"\b(create|add|insert|new)\b", re.I),
    re.compile(r"\b(update|modify|edit|change)\b", re.I),
    re.compile(r"\b(delete|remove|cancel)\b", re.I),
    re.compile(r"\b(view|display|show|list)\b", re.I),
    re.compile(r"\b(search|find|filter|query)\b", re.I),
    re.compile(r"\b(track|monitor|record|log)\b", re.I),
    re.compile(r"\b(approve|reject|validate|verify)\b", re.I),
    re.compile(r"\b(calculate|compute|process|analyze)\b", re.I),
]

RULE_PATTERNS = [
    re.compile(r"\b(must|should|required|mandatory|optional)\b", re.I),
    re.compile(r"\b(if|when|then|unless|provided)\b", re.I),
    re.compile(r"\b(minimum|maximum|at least|no more than)\b", re.I),
    re.compile(r"\b(validate|verify|check|ensure)\b", re.I),
    re.compile(r"\b(cannot|not allowed|prohibited|restricted)\b", re.I),
]

FIELD_REQUIREMENT_PATTERNS = [
    re.compile(r"\b(field|column|property|attribute)\b", re.I),
    re.compile(r"\b(store|save|record|capture)\b", re.I),
    re.compile(r"\b(input|enter|provide|specify)\b", re.I),
    re.compile(r"\b(name|title|description|details)\b", re.I),
    re.compile(r"\b(date|time|amount|quantity|price)\b", re.I),
]

REQUIRED_CONTEXT = [
    re.compile(r"\b(required|mandatory|must|essential)\b", re.I),
    re.compile(r"\b(id|name|title|email)\b", re.I),
]
OPTIONAL_CONTEXT = [
    re.compile(r"\b(optional|may|might|could)\b", re.I),
    re.compile(r"\b(description|notes|comments)\b", re.I),
]

INDUSTRY_KEYWORDS = [
    ("restaurant", ["restaurant", "food", "menu", "kitchen", "dining", "chef", "recipe"]),
    ("retail", ["retail", "store", "shop", "product", "sale", "customer", "inventory"]),
    ("healthcare", ["patient", "medical", "healthcare", "hospital", "clinic", "doctor", "treatment"]),
    ("manufacturing", ["manufacturing", "production", "factory", "assembly", "quality", "process"]),
    ("finance", ["bank", "financial", "investment", "loan", "credit", "portfolio", "trading"]),
    ("education", ["school", "student", "course", "grade", "teacher", "education", "learning"]),
    ("technology", ["software", "application", "system", "development", "programming", "tech"]),
]

USE_CASE_PATTERNS = [
    ("data_entry", re.compile(r"\b(enter|input|capture|record|store)\b", re.I)),
    ("reporting", re.compile(r"\b(report|analyze|dashboard|metrics|analytics)\b", re.I)),
    ("workflow", re.compile(r"\b(process|workflow|approval|review|manage)\b", re.I)),
    ("tracking", re.compile(r"\b(track|monitor|follow|status|progress)\b", re.I)),
    ("communication", re.compile(r"\b(communicate|notify|alert|message|email)\b", re.I)),
    ("integration", re.compile(r"\b(integrate|connect|sync|import|export)\b", re.I)),
]

STOP_WORDS = {"a", "an", "the", "for", "to", "of", "in", "on", "at", "by", "with"}

PLACEHOLDERS = {
    "email": "user@example.com",
    "phone": "+1 (555) 123-4567",
    "url": "https://example.com",
    "currency": "$0.00",
    "percentage": "0%",
    "date": "Select date...",
    "number": "0",
    "boolean": "Yes/No",
}

# Generated field types as seen by the mapping rules
LEGACY_TYPE_FOR = {
    "number": LegacyFieldType.NUMBER,
    "currency": LegacyFieldType.NUMBER,
    "percentage": LegacyFieldType.NUMBER,
    "boolean": LegacyFieldType.BOOLEAN,
    "date": LegacyFieldType.DATE,
    "datetime": LegacyFieldType.DATE,
    "json": LegacyFieldType.JSON,
}

SYSTEM_FIELDS = [
    {"name": "id", "type": "text", "required": True, "label": "ID"},
    {"name": "created_at", "type": "datetime", "required": True, "label": "Created At"},
    {"name": "updated_at", "type": "datetime", "required": True, "label": "Updated At"},
]


def field_label(field_name: str) -> str:
    return field_name.replace("_", " ").title()


def _clean_word(word: str) -> str:
    return re.sub(r"[^a-z0-9_]", "", word.lower())


def system_field(spec: Dict[str, Any]) -> GeneratedField:
    return GeneratedField(
        name=spec["name"],
        type=spec["type"],
        required=spec["required"],
        label=spec["label"],
        source="system",
        confidence=1.0,
        ai_generated=False,
    )


class RuleBasedSchemaGenerator:
    """Generates schemas from requirement text without any AI call"""

    def __init__(
        self,
        classifier: Optional[DomainClassifier] = None,
        mapper: Optional[HeuristicMapper] = None,
    ):
        self.classifier = classifier or DomainClassifier()
        self.mapper = mapper or HeuristicMapper()

    def generate(self, requirement: str, entity_type: Optional[str] = None) -> GeneratedSchema:
        """
        Generate a schema for a business requirement.

        Args:
            requirement: Free-text business requirement
            entity_type: Optional entity type hint

        Returns:
            GeneratedSchema
        """
        analysis = self.analyze_requirement(requirement)
        domain = self.classifier.classify(requirement)
        resolved_type = entity_type or analysis["entityType"]
        fields = self.generate_fields(requirement, domain)
        self.annotate_mappings(fields, resolved_type)

        schema = GeneratedSchema(
            entity_type=resolved_type,
            name=self.entity_name(requirement, entity_type),
            domain=domain,
            fields=fields,
            metadata=self.generate_metadata(requirement, domain),
            confidence=self.calculate_confidence(requirement, domain, fields),
            suggestions=self.generate_suggestions(domain, fields),
            validation_rules=self.generate_validation_rules(fields),
            business_rules=self.generate_business_rules(requirement, domain),
            audit_trail={
                "generated_at": utc_now_iso(),
                "requirement": requirement,
                "analysis": analysis,
            },
        )

        logger.info(
            f"Rule-based schema '{schema.entity_type}' generated with {len(fields)} fields "
            f"(domain={domain.name}, confidence={schema.confidence:.2f})"
        )
        return schema

    # ------------------------------------------------------------------
    # Requirement analysis
    # ------------------------------------------------------------------

    def analyze_requirement(self, requirement: str) -> Dict[str, Any]:
        """Break a requirement into words, sentences, entities, actions and rules."""
        words = requirement.lower().split()
        sentences = [s.strip() for s in re.split(r"[.!?]+", requirement) if s.strip()]

        entities = self._matching_words(words, ENTITY_PATTERNS)
        actions = self._matching_words(words, ACTION_PATTERNS)

        return {
            "originalText": requirement,
            "words": words,
            "sentences": sentences,
            "entities": entities,
            "actions": actions,
            "businessRules": self._matching_sentences(sentences, RULE_PATTERNS),
            "fieldRequirements": self._matching_sentences(sentences, FIELD_REQUIREMENT_PATTERNS),
            "entityType": self._determine_entity_type(entities, actions),
            "complexity": self.calculate_complexity(words, sentences, entities),
        }

    @staticmethod
    def _matching_words(words: List[str], patterns: List[re.Pattern]) -> List[str]:
        found: List[str] = []
        for word in words:
            cleaned = _clean_word(word)
            if cleaned and cleaned not in found and any(p.search(cleaned) for p in patterns):
                found.append(cleaned)
        return found

    @staticmethod
    def _matching_sentences(sentences: List[str], patterns: List[re.Pattern]) -> List[str]:
        return [s for s in sentences if any(p.search(s) for p in patterns)]

    @staticmethod
    def _determine_entity_type(entities: List[str], actions: List[str]) -> str:
        if not entities:
            return "custom_entity"
        if len(entities) > 1 and "create" in actions:
            return f"{entities[0]}_{entities[1]}"
        return entities[0]

    @staticmethod
    def calculate_complexity(words: List[str], sentences: List[str], entities: List[str]) -> float:
        complexity = len(words) * 0.1 + len(sentences) * 0.5 + len(entities) * 0.3
        return min(complexity / 10, 1.0)

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def generate_fields(self, requirement: str, domain: BusinessDomain) -> List[GeneratedField]:
        """Domain common fields, then text-extracted fields, wrapped by system fields."""
        fields: List[GeneratedField] = []

        for common in domain.common_fields:
            fields.append(GeneratedField(
                name=common["name"],
                type=common["type"],
                required=common.get("required", False),
                label=field_label(common["name"]),
                options=list(common["options"]) if common.get("options") else None,
                source="domain",
                confidence=0.8,
                ai_generated=True,
            ))

        for extracted in self.extract_fields_from_text(requirement):
            if not any(f.name == extracted.name for f in fields):
                fields.append(extracted)

        names = [f.name for f in fields]
        if "id" not in names:
            fields.insert(0, system_field(SYSTEM_FIELDS[0]))
        for spec in SYSTEM_FIELDS[1:]:
            if spec["name"] not in names:
                fields.append(system_field(spec))

        return fields

    def extract_fields_from_text(self, requirement: str) -> List[GeneratedField]:
        """One field per word that matches a field pattern, named with its preceding word."""
        words = [_clean_word(w) for w in requirement.split()]
        words = [w for w in words if w]
        fields: List[GeneratedField] = []

        for index, word in enumerate(words):
            for _, field_type, pattern, options in FIELD_PATTERNS:
                if not pattern.search(word):
                    continue
                name = f"{words[index - 1]}_{word}" if index > 0 else word
                if any(f.name == name for f in fields):
                    continue
                fields.append(GeneratedField(
                    name=name,
                    type=field_type,
                    required=self._is_required(word, words, index),
                    label=field_label(name),
                    options=list(options) if options else None,
                    source="pattern",
                    confidence=0.7,
                    ai_generated=True,
                    placeholder=PLACEHOLDERS.get(field_type, f"Enter {name.replace('_', ' ')}..."),
                ))

        return fields

    @staticmethod
    def _is_required(word: str, words: List[str], index: int) -> bool:
        context = " ".join(words[max(0, index - 2): index + 3])
        if any(p.search(context) for p in REQUIRED_CONTEXT):
            return True
        if any(p.search(context) for p in OPTIONAL_CONTEXT):
            return False
        return word in ("id", "name", "title", "email")

    def annotate_mappings(self, fields: List[GeneratedField], entity_type: str) -> None:
        """Attach the universal-schema target chosen by the mapping rules to each field."""
        for generated in fields:
            mapping = self.mapper.map_field(
                generated.name,
                LEGACY_TYPE_FOR.get(generated.type, LegacyFieldType.TEXT),
                entity_type,
            )
            generated.mapping = {
                "heraTable": mapping.hera_table.value,
                "heraField": mapping.hera_field,
                "mappingType": mapping.mapping_type.value,
                "confidence": mapping.confidence,
            }

    # ------------------------------------------------------------------
    # Envelope parts
    # ------------------------------------------------------------------

    @staticmethod
    def entity_name(requirement: str, entity_type: Optional[str] = None) -> str:
        if entity_type:
            return entity_type.replace("_", " ").title()
        words = [w for w in requirement.split() if w.lower() not in STOP_WORDS]
        return " ".join(words[:3]).title() or "Custom Entity"

    def generate_metadata(self, requirement: str, domain: BusinessDomain) -> Dict[str, Any]:
        return {
            "generated_at": utc_now_iso(),
            "generator_version": GENERATOR_VERSION,
            "requirement_analysis": {
                "domain": domain.name,
                "confidence": domain.confidence,
                "complexity": self.calculate_complexity(requirement.split(), [requirement], []),
            },
            "business_context": {
                "domain": domain.name,
                "industry": self.infer_industry(requirement),
                "use_case": self.infer_use_case(requirement),
            },
            "ai_insights": self.generate_insights(requirement, domain),
        }

    @staticmethod
    def generate_insights(requirement: str, domain: BusinessDomain) -> List[Dict[str, str]]:
        insights = []
        if domain.name == "finance":
            insights.append({
                "type": "compliance",
                "title": "Financial Compliance",
                "description": "Consider adding audit trails and approval workflows for financial data.",
                "priority": "high",
                "recommendation": "Add fields for approval status, approver, and audit trail.",
            })
        if domain.name == "hr":
            insights.append({
                "type": "privacy",
                "title": "Data Privacy",
                "description": "HR data requires special privacy and security considerations.",
                "priority": "high",
                "recommendation": "Implement data encryption and access controls.",
            })
        if len(requirement.split()) > 50:
            insights.append({
                "type": "complexity",
                "title": "Complex Requirement",
                "description": "This requirement is complex and may benefit from breaking into multiple entities.",
                "priority": "medium",
                "recommendation": "Consider creating related entities resolved through manual joins.",
            })
        return insights

    @staticmethod
    def calculate_confidence(requirement: str, domain: BusinessDomain, fields: List[GeneratedField]) -> float:
        average = sum(f.confidence for f in fields) / len(fields) if fields else 0.0
        clarity = min(len(requirement.split()) / 50, 1.0)
        return round(min(domain.confidence * 0.3 + average * 0.4 + clarity * 0.3, 1.0), 4)

    @staticmethod
    def generate_suggestions(domain: BusinessDomain, fields: List[GeneratedField]) -> List[str]:
        suggestions = []
        if domain.name == "finance":
            suggestions.append("Consider adding approval workflow fields")
            suggestions.append("Add audit trail and version control")
        if domain.name == "crm":
            suggestions.append("Consider adding lead scoring fields")
            suggestions.append("Add communication history tracking")

        types = {f.type for f in fields}
        if "currency" in types:
            suggestions.append("Consider adding currency code field for multi-currency support")
        if "email" in types:
            suggestions.append("Add email verification status field")
        if "date" in types:
            suggestions.append("Consider adding timezone information")
        return suggestions

    @staticmethod
    def generate_validation_rules(fields: List[GeneratedField]) -> Dict[str, Dict[str, Any]]:
        rules: Dict[str, Dict[str, Any]] = {}
        for generated in fields:
            rule: Dict[str, Any] = {}
            if generated.required:
                rule["required"] = True

            if generated.type == "email":
                rule["pattern"] = r"^[^@]+@[^@]+\.[^@]+$"
            elif generated.type == "phone":
                rule["pattern"] = r"^[\d\s\-\+\(\)]+$"
            elif generated.type == "url":
                rule["pattern"] = "^https?://"
            elif generated.type in ("currency", "number"):
                rule["min"] = 0
            elif generated.type == "text":
                if "code" in generated.name or "id" in generated.name:
                    rule.update(minLength=3, maxLength=50)
                else:
                    rule.update(minLength=1, maxLength=255)
            elif generated.type == "textarea":
                rule.update(minLength=1, maxLength=2000)

            rules[generated.name] = rule
        return rules

    @staticmethod
    def generate_business_rules(requirement: str, domain: BusinessDomain) -> List[str]:
        rules = []
        if domain.name == "finance":
            rules += [
                "All financial amounts must be positive",
                "Invoice numbers must be unique",
                "Payment dates cannot be in the future",
            ]
        if domain.name == "crm":
            rules += [
                "Email addresses must be unique per customer",
                "Customer status must be valid",
                "Lead scores must be between 0 and 100",
            ]
        if domain.name == "hr":
            rules += [
                "Employee IDs must be unique",
                "Hire dates cannot be in the future",
                "Active employees must have valid departments",
            ]

        for sentence in re.split(r"[.!?]+", requirement):
            lowered = sentence.lower()
            if sentence.strip() and ("must" in lowered or "required" in lowered):
                rules.append(sentence.strip())
        return rules

    @staticmethod
    def infer_industry(requirement: str) -> str:
        words = set(_clean_word(w) for w in requirement.split())
        for industry, keywords in INDUSTRY_KEYWORDS:
            if any(keyword in words for keyword in keywords):
                return industry
        return "general"

    @staticmethod
    def infer_use_case(requirement: str) -> str:
        for use_case, pattern in USE_CASE_PATTERNS:
            if pattern.search(requirement):
                return use_case
        return "general"
