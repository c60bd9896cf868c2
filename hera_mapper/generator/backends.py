"""
AI Backends - Schema generation through hosted language models.

Each backend exposes generate_schema(requirement, entity_type) returning the
raw JSON schema envelope. Missing credentials, SDK errors, timeouts and
unparseable replies all raise AIBackendError.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import anthropic
import openai

from hera_mapper.config import AIConfig
from hera_mapper.errors import AIBackendError

logger = logging.getLogger(__name__)

JSON_BLOCK_PATTERN = re.compile(r"\{.*\}", re.S)


def build_schema_prompt(requirement: str, entity_type: Optional[str] = None) -> str:
    """Prompt asking for the GeneratedSchema JSON envelope."""
    entity_line = f"Entity Type: {entity_type}\n" if entity_type else ""
    return f"""You are an expert business analyst and database architect. Analyze the business
requirement below and design an entity for a universal schema (entities, dynamic
attributes, metadata, transactions; tenant scoped by organization_id, no foreign keys).

Business Requirement: "{requirement}"
{entity_line}
Respond with a single JSON object and nothing else, using this structure:
{{
  "entityType": "suggested_entity_type",
  "entityName": "Human Readable Name",
  "domain": {{"name": "business_domain", "confidence": 0.95, "keywords": [], "commonFields": []}},
  "fields": [
    {{"name": "field_name", "type": "text|number|currency|date|datetime|boolean|email|phone|select|textarea",
      "required": true, "label": "Field Label", "placeholder": "Enter value...",
      "source": "ai", "confidence": 0.9, "aiGenerated": true}}
  ],
  "metadata": {{
    "requirement_analysis": {{"domain": "identified_domain", "confidence": 0.95, "complexity": 0.7}},
    "business_context": {{"domain": "domain_name", "industry": "industry_type", "use_case": "primary_use_case"}},
    "ai_insights": [{{"type": "compliance", "title": "...", "description": "...",
                      "priority": "high", "recommendation": "..."}}]
  }},
  "confidence": 0.92,
  "suggestions": ["..."],
  "validationRules": {{"field_name": {{"required": true, "minLength": 1}}}},
  "businessRules": ["..."]
}}"""


def extract_json(text: str, backend: str) -> Dict[str, Any]:
    """Parse the first JSON object found in a model reply."""
    match = JSON_BLOCK_PATTERN.search(text or "")
    if not match:
        raise AIBackendError(backend, "Response did not contain a JSON object")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AIBackendError(backend, f"Malformed JSON in response: {e}")
    if not isinstance(data, dict):
        raise AIBackendError(backend, "Response JSON is not an object")
    return data


class AIBackend(ABC):
    """A schema generation backend"""

    name = "ai"

    @abstractmethod
    def generate_schema(self, requirement: str, entity_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate a raw schema envelope.

        Raises:
            AIBackendError: On any failure
        """
        pass


class ChatBackend(AIBackend):
    """Shared prompt and reply handling for hosted chat models"""

    def __init__(self, api_key: str, model: str, timeout: int = 30, max_tokens: int = 4000, client: Any = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def generate_schema(self, requirement: str, entity_type: Optional[str] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise AIBackendError(self.name, "API key not configured")

        prompt = build_schema_prompt(requirement, entity_type)
        logger.debug(f"Calling {self.name} ({self.model}), timeout={self.timeout}s")

        text = self._complete(prompt)
        schema = extract_json(text, self.name)
        logger.info(f"{self.name} returned schema '{schema.get('entityType', '?')}'")
        return schema

    @abstractmethod
    def _create_client(self) -> Any:
        pass

    @abstractmethod
    def _complete(self, prompt: str) -> str:
        """Send the prompt and return the reply text."""
        pass


class AnthropicBackend(ChatBackend):
    """Claude via the Anthropic Messages API"""

    name = "anthropic"

    def _create_client(self) -> anthropic.Anthropic:
        # No SDK retries: a failed call falls through to the next backend
        return anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    def _complete(self, prompt: str) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError:
            raise AIBackendError(self.name, f"Request timed out after {self.timeout}s")
        except anthropic.APIError as e:
            raise AIBackendError(self.name, f"Request failed: {e}")

        try:
            return "".join(block.text for block in response.content if block.type == "text")
        except (AttributeError, TypeError):
            raise AIBackendError(self.name, "Unexpected response structure")


class OpenAIBackend(ChatBackend):
    """GPT via the OpenAI Chat Completions API"""

    name = "openai"

    def _create_client(self) -> openai.OpenAI:
        return openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    def _complete(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0.1,
                response_format={"type": "json_object"},
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APITimeoutError:
            raise AIBackendError(self.name, f"Request timed out after {self.timeout}s")
        except openai.APIError as e:
            raise AIBackendError(self.name, f"Request failed: {e}")

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError):
            raise AIBackendError(self.name, "Unexpected response structure")


def create_backends(config: AIConfig) -> List[AIBackend]:
    """Build the configured backends in priority order."""
    factories = {
        "anthropic": lambda: AnthropicBackend(
            config.anthropic_api_key, config.anthropic_model, config.timeout, config.max_tokens,
        ),
        "openai": lambda: OpenAIBackend(
            config.openai_api_key, config.openai_model, config.timeout, config.max_tokens,
        ),
    }
    backends = []
    for name in config.backend_order:
        if name not in factories:
            raise ValueError(f"Unknown AI backend: {name}")
        backends.append(factories[name]())
    return backends
