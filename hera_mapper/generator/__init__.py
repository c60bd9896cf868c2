"""
Schema Generation Module

Builds entity schemas from free-text business requirements:
- Registry reuse of existing tenant schemas
- Hosted AI backends tried in order
- Rule-based generation as the final fallback
"""

from .backends import AIBackend, AnthropicBackend, OpenAIBackend, create_backends
from .models import GeneratedField, GeneratedSchema
from .normalizer import SchemaNormalizer
from .orchestrator import SchemaGenerationOrchestrator
from .rule_based import RuleBasedSchemaGenerator

__all__ = [
    "AIBackend",
    "AnthropicBackend",
    "OpenAIBackend",
    "create_backends",
    "GeneratedField",
    "GeneratedSchema",
    "SchemaNormalizer",
    "SchemaGenerationOrchestrator",
    "RuleBasedSchemaGenerator",
]
