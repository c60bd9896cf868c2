"""
Schema Generation Orchestrator - Registry reuse, AI backends, rule-based fallback.

Steps, strictly sequential:
1. Reuse an existing tenant schema when the registry reports a strong match
2. Try each AI backend in order, accepting the first confident normalized result
3. Fall back to the rule-based generator

The orchestrator always returns a schema; backend and registry failures are logged.
"""

import logging
from typing import List, Optional

from hera_mapper.config import AIConfig
from hera_mapper.errors import AIBackendError, RegistryWriteError
from hera_mapper.generator.backends import AIBackend, create_backends
from hera_mapper.generator.models import GeneratedSchema
from hera_mapper.generator.normalizer import SchemaNormalizer
from hera_mapper.generator.rule_based import RuleBasedSchemaGenerator
from hera_mapper.registry.schema_registry import USE_EXISTING, SchemaRegistry

logger = logging.getLogger(__name__)

# Fixed cutoff for returning a registered schema instead of generating one
REUSE_SCORE_CUTOFF = 0.8


class SchemaGenerationOrchestrator:
    """
    Chooses how a schema is produced for a business requirement

    Usage:
    ```python
    orchestrator = SchemaGenerationOrchestrator(registry=SchemaRegistry())
    schema = orchestrator.generate_schema("Track customers with email", organization_id="org-1")
    ```
    """

    def __init__(
        self,
        backends: Optional[List[AIBackend]] = None,
        registry: Optional[SchemaRegistry] = None,
        rule_based: Optional[RuleBasedSchemaGenerator] = None,
        normalizer: Optional[SchemaNormalizer] = None,
        config: Optional[AIConfig] = None,
    ):
        self.config = config or AIConfig.from_env()
        self.backends = backends if backends is not None else create_backends(self.config)
        self.registry = registry or SchemaRegistry()
        self.rule_based = rule_based or RuleBasedSchemaGenerator()
        self.normalizer = normalizer or SchemaNormalizer(self.rule_based)

    def generate_schema(
        self,
        requirement: str,
        entity_type: Optional[str] = None,
        organization_id: Optional[str] = None,
        ai_enabled: Optional[bool] = None,
    ) -> GeneratedSchema:
        """
        Produce a schema for a requirement

        Args:
            requirement: Free-text business requirement
            entity_type: Optional entity type hint
            organization_id: Tenant scope for registry reuse and registration;
                             None skips the registry
            ai_enabled: Per-call override of the configured AI switch

        Returns:
            Existing, AI generated or rule-based GeneratedSchema
        """
        if ai_enabled is None:
            ai_enabled = self.config.enabled

        if organization_id:
            existing = self._reuse_existing(requirement, entity_type, organization_id)
            if existing is not None:
                return existing

        if ai_enabled:
            schema = self._generate_with_ai(requirement, entity_type, organization_id)
            if schema is not None:
                return schema
        else:
            logger.debug("AI generation disabled, using rule-based generator")

        logger.info("Falling back to rule-based schema generation")
        return self.rule_based.generate(requirement, entity_type)

    def _reuse_existing(
        self,
        requirement: str,
        entity_type: Optional[str],
        organization_id: str,
    ) -> Optional[GeneratedSchema]:
        matches = self.registry.find_similar_schemas(organization_id, requirement, entity_type)
        if not matches:
            return None

        top = matches[0]
        if top.recommendation != USE_EXISTING or top.similarity_score <= REUSE_SCORE_CUTOFF:
            return None

        entry = self.registry.get_schema_by_type(organization_id, top.entity_type)
        if entry is None:
            return None

        logger.info(
            f"Reusing registered schema '{entry.entity_type}' "
            f"(similarity {top.similarity_score:.2f}): {top.reason}"
        )
        return GeneratedSchema.from_dict(entry.schema_definition)

    def _generate_with_ai(
        self,
        requirement: str,
        entity_type: Optional[str],
        organization_id: Optional[str],
    ) -> Optional[GeneratedSchema]:
        prompt_requirement = requirement
        if organization_id:
            context = self.registry.generate_ai_context(organization_id)
            if context:
                prompt_requirement = f"{requirement}\n\nExisting Schema Context:\n{context}"

        for backend in self.backends:
            try:
                raw = backend.generate_schema(prompt_requirement, entity_type)
            except AIBackendError as e:
                logger.warning(f"AI backend failed: {e}")
                continue

            try:
                schema = self.normalizer.normalize(raw, requirement)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"{backend.name} returned a malformed schema: {e}")
                continue

            if schema.confidence <= self.config.min_confidence:
                logger.warning(
                    f"{backend.name} schema confidence {schema.confidence:.2f} is below "
                    f"{self.config.min_confidence:.2f}, trying next backend"
                )
                continue

            schema.metadata["generation_source"] = backend.name
            if organization_id:
                self._register(organization_id, schema)
            return schema

        return None

    def _register(self, organization_id: str, schema: GeneratedSchema) -> None:
        try:
            self.registry.register_schema(
                organization_id,
                schema.entity_type,
                schema.name,
                schema.to_dict(),
                ai_generated=True,
            )
        except RegistryWriteError as e:
            logger.warning(f"Generated schema was not registered: {e}")
