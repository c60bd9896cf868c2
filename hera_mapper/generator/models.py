"""Generated schema envelope shared by AI backends and the rule-based generator."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from hera_mapper.mapper.domain import BusinessDomain, clamp_confidence


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dict_or_none(value: Any) -> Optional[Dict[str, Any]]:
    return dict(value) if isinstance(value, dict) else None


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass
class GeneratedField:
    """One field of a generated schema."""

    name: str
    type: str
    required: bool = False
    label: str = ""
    options: Optional[List[str]] = None
    source: str = "pattern"  # "domain", "pattern", "system", "ai"
    confidence: float = 0.7
    ai_generated: bool = True
    placeholder: Optional[str] = None
    description: Optional[str] = None
    validation: Optional[Dict[str, Any]] = None
    mapping: Optional[Dict[str, Any]] = None  # Universal-schema target for this field

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "label": self.label,
            "source": self.source,
            "confidence": self.confidence,
            "aiGenerated": self.ai_generated,
        }
        for key, value in (
            ("options", self.options),
            ("placeholder", self.placeholder),
            ("description", self.description),
            ("validation", self.validation),
            ("mapping", self.mapping),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedField":
        name = str(data.get("name") or "").strip()
        options = data.get("options")
        return cls(
            name=name,
            type=str(data.get("type") or "text"),
            required=bool(data.get("required", False)),
            label=str(data.get("label") or name.replace("_", " ").title()),
            options=[str(o) for o in options] if isinstance(options, list) and options else None,
            source=str(data.get("source") or "ai"),
            confidence=clamp_confidence(data.get("confidence"), default=0.8),
            ai_generated=bool(data.get("aiGenerated", data.get("ai_generated", True))),
            placeholder=_str_or_none(data.get("placeholder")),
            description=_str_or_none(data.get("description")),
            validation=_dict_or_none(data.get("validation")),
            mapping=_dict_or_none(data.get("mapping")),
        )


@dataclass
class GeneratedSchema:
    """Schema produced from a business requirement."""

    entity_type: str
    name: str
    domain: BusinessDomain
    fields: List[GeneratedField] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    suggestions: List[str] = field(default_factory=list)
    validation_rules: Dict[str, Any] = field(default_factory=dict)
    business_rules: List[str] = field(default_factory=list)
    audit_trail: Dict[str, Any] = field(default_factory=dict)

    def get_field(self, name: str) -> Optional[GeneratedField]:
        for generated in self.fields:
            if generated.name == name:
                return generated
        return None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "entityType": self.entity_type,
            "name": self.name,
            "domain": self.domain.to_dict(),
            "fields": [f.to_dict() for f in self.fields],
            "metadata": self.metadata,
            "confidence": self.confidence,
            "suggestions": list(self.suggestions),
            "validationRules": self.validation_rules,
            "businessRules": list(self.business_rules),
            "auditTrail": self.audit_trail,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedSchema":
        """Rebuild a schema serialized with to_dict()."""
        return cls(
            entity_type=data["entityType"],
            name=data["name"],
            domain=BusinessDomain.from_dict(data.get("domain") or {}),
            fields=[GeneratedField.from_dict(f) for f in data.get("fields", [])],
            metadata=dict(data.get("metadata") or {}),
            confidence=clamp_confidence(data.get("confidence")),
            suggestions=list(data.get("suggestions") or []),
            validation_rules=dict(data.get("validationRules") or {}),
            business_rules=list(data.get("businessRules") or []),
            audit_trail=dict(data.get("auditTrail") or {}),
        )
