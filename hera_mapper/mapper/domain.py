"""Business domain knowledge base and keyword classifier."""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def clamp_confidence(value: Any, default: float = 0.0) -> float:
    """Coerce a confidence-like value into [0, 1]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(0.0, min(1.0, number))


@dataclass
class BusinessDomain:
    """Classification result for a requirement or field name."""

    name: str
    confidence: float
    keywords: List[str] = field(default_factory=list)
    common_fields: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "confidence": self.confidence,
            "keywords": list(self.keywords),
            "commonFields": [dict(f) for f in self.common_fields],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BusinessDomain":
        keywords = data.get("keywords")
        common_fields = data.get("commonFields") or data.get("common_fields")
        return cls(
            name=str(data.get("name") or "general"),
            confidence=clamp_confidence(data.get("confidence")),
            keywords=[str(k) for k in keywords] if isinstance(keywords, list) else [],
            common_fields=[dict(f) for f in common_fields if isinstance(f, dict)]
            if isinstance(common_fields, list) else [],
        )


# Enumeration order is significant: ties go to the first domain listed.
BUSINESS_DOMAINS: "OrderedDict[str, Dict[str, Any]]" = OrderedDict([
    ("finance", {
        "keywords": [
            "invoice", "payment", "expense", "revenue", "tax", "accounting", "budget",
            "cost", "profit", "loss", "balance", "ledger", "journal", "credit", "debit",
            "financial",
        ],
        "common_fields": [
            {"name": "amount", "type": "currency", "required": True},
            {"name": "date", "type": "date", "required": True},
            {"name": "reference_number", "type": "text", "required": True},
            {"name": "description", "type": "textarea", "required": False},
            {"name": "status", "type": "select", "required": True,
             "options": ["pending", "approved", "rejected", "paid"]},
        ],
        "entities": ["invoice", "payment", "expense", "budget", "journal_entry", "account", "transaction"],
    }),
    ("crm", {
        "keywords": [
            "customer", "client", "contact", "lead", "opportunity", "prospect", "sales",
            "marketing", "campaign", "deal", "pipeline", "relationship",
        ],
        "common_fields": [
            {"name": "name", "type": "text", "required": True},
            {"name": "email", "type": "email", "required": True},
            {"name": "phone", "type": "phone", "required": True},
            {"name": "company", "type": "text", "required": False},
            {"name": "status", "type": "select", "required": True,
             "options": ["active", "inactive", "potential", "converted"]},
        ],
        "entities": ["customer", "lead", "contact", "opportunity", "campaign", "deal"],
    }),
    ("inventory", {
        "keywords": [
            "product", "item", "stock", "inventory", "warehouse", "supplier", "purchase",
            "order", "quantity", "unit", "category", "catalog",
        ],
        "common_fields": [
            {"name": "product_name", "type": "text", "required": True},
            {"name": "sku", "type": "text", "required": True},
            {"name": "quantity", "type": "number", "required": True},
            {"name": "unit_price", "type": "currency", "required": True},
            {"name": "category", "type": "select", "required": True,
             "options": ["raw_materials", "finished_goods", "consumables"]},
            {"name": "supplier", "type": "text", "required": False},
        ],
        "entities": ["product", "inventory", "stock", "supplier", "purchase_order", "goods_receipt"],
    }),
    ("hr", {
        "keywords": [
            "employee", "staff", "personnel", "payroll", "salary", "department",
            "position", "hire", "performance", "leave", "attendance",
        ],
        "common_fields": [
            {"name": "employee_id", "type": "text", "required": True},
            {"name": "full_name", "type": "text", "required": True},
            {"name": "email", "type": "email", "required": True},
            {"name": "department", "type": "select", "required": True,
             "options": ["finance", "hr", "it", "operations", "sales"]},
            {"name": "position", "type": "text", "required": True},
            {"name": "hire_date", "type": "date", "required": True},
            {"name": "is_active", "type": "boolean", "required": True},
        ],
        "entities": ["employee", "department", "position", "payroll", "leave", "attendance"],
    }),
    ("project", {
        "keywords": [
            "project", "task", "milestone", "deadline", "resource", "team", "timeline",
            "deliverable", "scope", "budget", "client",
        ],
        "common_fields": [
            {"name": "project_name", "type": "text", "required": True},
            {"name": "project_code", "type": "text", "required": True},
            {"name": "start_date", "type": "date", "required": True},
            {"name": "end_date", "type": "date", "required": False},
            {"name": "budget", "type": "currency", "required": False},
            {"name": "status", "type": "select", "required": True,
             "options": ["planning", "in_progress", "on_hold", "completed", "cancelled"]},
            {"name": "description", "type": "textarea", "required": False},
        ],
        "entities": ["project", "task", "milestone", "resource", "team", "deliverable"],
    }),
    ("restaurant", {
        "keywords": [
            "menu", "item", "ingredient", "recipe", "order", "table", "customer",
            "reservation", "kitchen", "food", "beverage", "meal",
        ],
        "common_fields": [
            {"name": "name", "type": "text", "required": True},
            {"name": "price", "type": "currency", "required": True},
            {"name": "category", "type": "select", "required": True,
             "options": ["appetizer", "main_course", "dessert", "beverage"]},
            {"name": "description", "type": "textarea", "required": False},
            {"name": "is_available", "type": "boolean", "required": True},
            {"name": "preparation_time", "type": "number", "required": False},
        ],
        "entities": ["menu_item", "order", "table", "reservation", "ingredient", "recipe"],
    }),
    ("retail", {
        "keywords": [
            "product", "sale", "customer", "transaction", "price", "discount",
            "promotion", "category", "brand", "retail", "store",
        ],
        "common_fields": [
            {"name": "product_name", "type": "text", "required": True},
            {"name": "price", "type": "currency", "required": True},
            {"name": "category", "type": "select", "required": True,
             "options": ["electronics", "clothing", "food", "home", "books"]},
            {"name": "brand", "type": "text", "required": False},
            {"name": "in_stock", "type": "boolean", "required": True},
            {"name": "description", "type": "textarea", "required": False},
        ],
        "entities": ["product", "sale", "customer", "transaction", "promotion", "category"],
    }),
])

GENERAL_DOMAIN = "general"


def general_domain(confidence: float = 0.5) -> BusinessDomain:
    """Domain used when nothing better is known."""
    return BusinessDomain(name=GENERAL_DOMAIN, confidence=confidence)


class DomainClassifier:
    """Scores free text against the known business-domain keyword sets."""

    def __init__(self, domains: "OrderedDict[str, Dict[str, Any]]" = BUSINESS_DOMAINS):
        self.domains = domains

    @staticmethod
    def tokenize(text: str) -> List[str]:
        return text.lower().split()

    def scores(self, text: str) -> "OrderedDict[str, int]":
        """
        Raw match count per domain.

        A token matches a keyword when either contains the other; each
        (token, keyword) pair counts once.
        """
        tokens = self.tokenize(text)
        result: "OrderedDict[str, int]" = OrderedDict()
        for name, config in self.domains.items():
            result[name] = sum(
                1
                for keyword in config["keywords"]
                for token in tokens
                if keyword in token or token in keyword
            )
        return result

    def classify(self, text: str) -> BusinessDomain:
        """
        Pick the best matching domain.

        Ties are resolved by enumeration order. A zero-score winner is still
        returned; callers treat confidence ~0 as unclassified.
        """
        tokens = self.tokenize(text)
        scores = self.scores(text)

        best_name = None
        best_score = -1
        for name, score in scores.items():
            if score > best_score:
                best_name, best_score = name, score

        confidence = min(best_score / len(tokens), 1.0) if tokens else 0.0
        config = self.domains[best_name]

        logger.debug(f"Classified text as '{best_name}' (score={best_score}, confidence={confidence:.2f})")
        return BusinessDomain(
            name=best_name,
            confidence=confidence,
            keywords=list(config["keywords"]),
            common_fields=[dict(f) for f in config["common_fields"]],
        )

    def typical_entities(self, domain_name: str) -> List[str]:
        return list(self.domains.get(domain_name, {}).get("entities", []))
