"""
Unit tests for Schema Generation

Tests:
- RuleBasedSchemaGenerator: analysis, fields, mappings, envelope
- SchemaNormalizer: defaults, clamping, system fields, advisory insight
- AI backends: request shape and error mapping (SDK clients mocked)
"""

from types import SimpleNamespace
from unittest.mock import Mock

import anthropic
import httpx
import openai
import pytest

from hera_mapper.config import AIConfig
from hera_mapper.errors import AIBackendError
from hera_mapper.generator.backends import (
    AnthropicBackend,
    OpenAIBackend,
    build_schema_prompt,
    create_backends,
    extract_json,
)
from hera_mapper.generator.models import GeneratedSchema, clamp_confidence
from hera_mapper.generator.normalizer import AI_ADVISORY_INSIGHT, SchemaNormalizer, find_gaps
from hera_mapper.generator.rule_based import RuleBasedSchemaGenerator


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def generator():
    return RuleBasedSchemaGenerator()


@pytest.fixture
def ai_schema():
    """Schema envelope as returned by an AI backend"""
    return {
        "entityType": "customer",
        "entityName": "Customer",
        "domain": {"name": "crm", "confidence": 0.95, "keywords": ["customer"], "commonFields": []},
        "fields": [
            {"name": "full_name", "type": "text", "required": True, "label": "Full Name",
             "source": "ai", "confidence": 0.9, "aiGenerated": True},
            {"name": "email", "type": "email", "required": True, "confidence": 1.7},
        ],
        "metadata": {"ai_insights": [{"type": "privacy", "title": "PII"}]},
        "confidence": 0.92,
        "suggestions": ["Add consent tracking"],
        "validationRules": {"email": {"required": True}},
        "businessRules": ["Email must be unique"],
    }


def anthropic_client(text="", error=None):
    """Mock Anthropic client replying with one text block, or raising error"""
    client = Mock()
    client.messages.create.side_effect = error
    client.messages.create.return_value = SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)]
    )
    return client


def openai_client(content="", error=None):
    """Mock OpenAI client replying with one choice, or raising error"""
    client = Mock()
    client.chat.completions.create.side_effect = error
    client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )
    return client


REQUEST = httpx.Request("POST", "https://api.example.test/v1")


# ============================================================================
# RULE-BASED GENERATOR
# ============================================================================


class TestRuleBasedGenerator:
    """Test requirement-driven schema generation"""

    def test_customer_requirement(self, generator):
        """A CRM requirement yields a customer schema with CRM fields"""
        schema = generator.generate("Manage customer contact leads")

        assert schema.entity_type == "customer"
        assert schema.domain.name == "crm"
        names = schema.field_names
        assert names[0] == "id"
        assert {"name", "email", "phone", "status", "created_at", "updated_at"} <= set(names)
        assert 0.0 <= schema.confidence <= 1.0

    def test_keywords_match_by_containment(self, generator):
        """Tokens match keywords they are part of, so "and" counts for "brand" """
        schema = generator.generate("Keep customer records with email and phone for sales")

        assert schema.domain.name == "retail"

    def test_entity_type_hint(self, generator):
        """The hint overrides the detected type and names the schema"""
        schema = generator.generate("Warehouse stock quantity", entity_type="stock_item")

        assert schema.entity_type == "stock_item"
        assert schema.name == "Stock Item"
        assert schema.domain.name == "inventory"

    def test_unknown_entity(self, generator):
        """Requirements without a known entity get custom_entity"""
        schema = generator.generate("Keep notes about things")

        assert schema.entity_type == "custom_entity"

    def test_system_fields_present_once(self, generator):
        """id, created_at and updated_at appear exactly once"""
        schema = generator.generate("Manage invoice payments with amount and due date")

        for name in ("id", "created_at", "updated_at"):
            assert schema.field_names.count(name) == 1
        assert schema.get_field("id").source == "system"
        assert schema.get_field("id").ai_generated is False

    def test_extracted_fields_named_after_preceding_word(self, generator):
        """Text fields join the matching word with the word before it"""
        fields = generator.extract_fields_from_text("Create customer records with email and phone")

        names = [f.name for f in fields]
        assert names == ["with_email", "and_phone"]
        assert fields[0].type == "email"
        assert fields[1].type == "phone"

    def test_fields_carry_universal_mapping(self, generator):
        """Each field is annotated with the mapping rule's target"""
        schema = generator.generate("Manage customer contact leads")

        email = schema.get_field("email")
        assert email.source == "domain"
        assert email.mapping["heraTable"] == "core_metadata"
        assert email.mapping["confidence"] == 0.90
        assert schema.get_field("name").mapping["heraField"] == "customer_name"
        assert schema.get_field("id").mapping["heraField"] == "id"
        contact = schema.get_field("customer_contact")
        assert contact.source == "pattern"
        assert contact.mapping["heraTable"] == "core_dynamic_data"
        assert all(f.mapping is not None for f in schema.fields)

    def test_finance_envelope(self, generator):
        """Finance requirements get compliance insight, suggestions and rules"""
        schema = generator.generate("Record invoice payment amount. Approval is required for large payments.")

        insight_titles = [i["title"] for i in schema.metadata["ai_insights"]]
        assert "Financial Compliance" in insight_titles
        assert "Consider adding approval workflow fields" in schema.suggestions
        assert "Invoice numbers must be unique" in schema.business_rules
        assert "Approval is required for large payments" in schema.business_rules
        assert schema.validation_rules["amount"]["min"] == 0

    def test_audit_trail(self, generator):
        """The audit trail keeps the requirement and its analysis"""
        requirement = "Track employee attendance"
        schema = generator.generate(requirement)

        assert schema.audit_trail["requirement"] == requirement
        assert schema.audit_trail["analysis"]["originalText"] == requirement
        assert "generated_at" in schema.audit_trail

    def test_deterministic_apart_from_timestamps(self, generator, monkeypatch):
        """Same input, same output once the clock is fixed"""
        monkeypatch.setattr("hera_mapper.generator.rule_based.utc_now_iso", lambda: "2024-01-01T00:00:00+00:00")

        first = generator.generate("Create customer records with email")
        second = generator.generate("Create customer records with email")

        assert first.to_dict() == second.to_dict()

    def test_industry_and_use_case(self, generator):
        """Business context is inferred from keywords"""
        assert generator.infer_industry("Restaurant menu with dishes") == "restaurant"
        assert generator.infer_industry("Something else") == "general"
        assert generator.infer_use_case("Generate a monthly report") == "reporting"


# ============================================================================
# NORMALIZER
# ============================================================================


class TestSchemaNormalizer:
    """Test normalization of AI responses"""

    def test_complete_response(self, ai_schema):
        """Provided parts are kept and system fields prepended"""
        schema = SchemaNormalizer().normalize(ai_schema, "customers with email")

        assert schema.entity_type == "customer"
        assert schema.name == "Customer"
        assert schema.domain.name == "crm"
        assert schema.field_names == ["id", "created_at", "updated_at", "full_name", "email"]
        assert schema.confidence == 0.92
        assert schema.business_rules == ["Email must be unique"]

    def test_field_confidence_clamped(self, ai_schema):
        """Out-of-range confidences are clamped into [0, 1]"""
        schema = SchemaNormalizer().normalize(ai_schema, "customers")

        assert schema.get_field("email").confidence == 1.0

    def test_advisory_insight_appended(self, ai_schema):
        """The AI advisory insight follows any provided insights"""
        schema = SchemaNormalizer().normalize(ai_schema, "customers")

        insights = schema.metadata["ai_insights"]
        assert insights[0]["title"] == "PII"
        assert insights[-1] == AI_ADVISORY_INSIGHT

    def test_empty_response_filled(self):
        """A bare response still produces a full schema"""
        schema = SchemaNormalizer().normalize({}, "Track customer orders")

        assert schema.entity_type == "custom_entity"
        assert schema.name
        assert schema.field_names == ["id", "created_at", "updated_at"]
        assert schema.confidence == 0.8
        assert schema.audit_trail["requirement"] == "Track customer orders"
        assert schema.metadata["ai_insights"][-1]["title"] == "AI-Generated Schema"

    def test_confidence_clamped(self, ai_schema):
        """Schema confidence above 1 is clamped"""
        ai_schema["confidence"] = 3
        assert SchemaNormalizer().normalize(ai_schema, "x").confidence == 1.0

    def test_non_numeric_domain_confidence(self, ai_schema):
        """A domain confidence that is not a number becomes 0"""
        ai_schema["domain"]["confidence"] = "high"

        schema = SchemaNormalizer().normalize(ai_schema, "customers")

        assert schema.domain.name == "crm"
        assert schema.domain.confidence == 0.0

    def test_domain_lists_of_wrong_shape(self, ai_schema):
        """Keyword and common field parts are kept only when they are lists"""
        ai_schema["domain"]["keywords"] = "customer"
        ai_schema["domain"]["commonFields"] = [{"name": "email"}, "phone"]

        domain = SchemaNormalizer().normalize(ai_schema, "customers").domain

        assert domain.keywords == []
        assert domain.common_fields == [{"name": "email"}]

    def test_validation_rules_must_be_an_object(self, ai_schema):
        """A list of validation rules is dropped"""
        ai_schema["validationRules"] = ["email must be unique"]

        assert SchemaNormalizer().normalize(ai_schema, "customers").validation_rules == {}

    def test_scalar_field_parts_dropped(self, ai_schema):
        """Options must be a list; validation and mapping must be objects"""
        ai_schema["fields"][0].update(options=3, validation="required", mapping=["core_entities"])

        full_name = SchemaNormalizer().normalize(ai_schema, "customers").get_field("full_name")

        assert full_name.options is None
        assert full_name.validation is None
        assert full_name.mapping is None

    def test_list_parts_of_wrong_shape(self, ai_schema):
        """Fields, suggestions and business rules are read only from lists"""
        ai_schema.update(fields={"name": "email"}, suggestions=5, businessRules="Email must be unique")

        schema = SchemaNormalizer().normalize(ai_schema, "customers")

        assert schema.field_names == ["id", "created_at", "updated_at"]
        assert schema.suggestions == []
        assert schema.business_rules == []

    def test_find_gaps(self, ai_schema):
        """Missing envelope parts are reported; entityName stands in for name"""
        gaps = find_gaps(ai_schema)

        assert "name" not in gaps
        assert gaps == ["auditTrail"]

    def test_clamp_confidence(self):
        """Non-numeric values fall back to the default"""
        assert clamp_confidence("high", default=0.3) == 0.3
        assert clamp_confidence(float("nan")) == 0.0
        assert clamp_confidence(-2) == 0.0

    def test_schema_round_trip(self, ai_schema):
        """Serialized schemas rebuild to equal objects"""
        schema = SchemaNormalizer().normalize(ai_schema, "customers")

        assert GeneratedSchema.from_dict(schema.to_dict()) == schema


# ============================================================================
# AI BACKENDS
# ============================================================================


class TestBackends:
    """Test SDK backends with mocked clients"""

    def test_extract_json_from_prose(self):
        """The first JSON object in a reply is parsed"""
        data = extract_json('Here you go:\n{"entityType": "customer"}\nThanks', "anthropic")

        assert data == {"entityType": "customer"}

    def test_extract_json_failures(self):
        """Replies without valid JSON raise AIBackendError"""
        with pytest.raises(AIBackendError):
            extract_json("no json here", "openai")
        with pytest.raises(AIBackendError):
            extract_json("{not: valid}", "openai")

    def test_prompt_mentions_requirement_and_type(self):
        """The prompt carries the requirement and the type hint"""
        prompt = build_schema_prompt("Track customers", "customer")

        assert 'Business Requirement: "Track customers"' in prompt
        assert "Entity Type: customer" in prompt

    def test_missing_key_raises_before_request(self):
        """No request is sent without an API key"""
        client = anthropic_client('{"entityType": "customer"}')
        backend = AnthropicBackend("", "claude", client=client)

        with pytest.raises(AIBackendError) as exc_info:
            backend.generate_schema("Track customers")

        client.messages.create.assert_not_called()
        assert exc_info.value.backend == "anthropic"

    def test_anthropic_request(self):
        """Anthropic calls use the messages API with the configured model"""
        client = anthropic_client('{"entityType": "customer", "confidence": 0.9}')
        backend = AnthropicBackend("key", "claude", max_tokens=1000, client=client)

        data = backend.generate_schema("Track customers")

        assert data["entityType"] == "customer"
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude"
        assert kwargs["max_tokens"] == 1000
        assert 'Business Requirement: "Track customers"' in kwargs["messages"][0]["content"]

    def test_openai_request(self):
        """OpenAI calls ask for a JSON object and read the first choice"""
        client = openai_client('{"entityType": "invoice"}')
        backend = OpenAIBackend("key", "gpt", client=client)

        data = backend.generate_schema("Track invoices")

        assert data == {"entityType": "invoice"}
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt"
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_sdk_clients_built_from_config(self):
        """Clients are the vendor SDKs carrying the configured API keys"""
        backends = create_backends(AIConfig(anthropic_api_key="a-key", openai_api_key="o-key", timeout=12))

        assert isinstance(backends[0].client, anthropic.Anthropic)
        assert backends[0].client.api_key == "a-key"
        assert isinstance(backends[1].client, openai.OpenAI)
        assert backends[1].client.api_key == "o-key"

    def test_anthropic_timeout_maps_to_backend_error(self):
        """Timeouts are backend failures"""
        client = anthropic_client(error=anthropic.APITimeoutError(request=REQUEST))
        backend = AnthropicBackend("key", "claude", timeout=1, client=client)

        with pytest.raises(AIBackendError) as exc_info:
            backend.generate_schema("Track customers")

        assert "timed out" in str(exc_info.value)

    def test_openai_timeout_maps_to_backend_error(self):
        """Timeouts are backend failures"""
        client = openai_client(error=openai.APITimeoutError(request=REQUEST))
        backend = OpenAIBackend("key", "gpt", timeout=1, client=client)

        with pytest.raises(AIBackendError) as exc_info:
            backend.generate_schema("Track invoices")

        assert "timed out" in str(exc_info.value)

    def test_api_errors_map_to_backend_error(self):
        """Connection and status errors from either SDK are backend failures"""
        anthropic_backend = AnthropicBackend(
            "key", "claude", client=anthropic_client(error=anthropic.APIConnectionError(request=REQUEST)),
        )
        openai_backend = OpenAIBackend(
            "key", "gpt", client=openai_client(error=openai.APIConnectionError(request=REQUEST)),
        )

        with pytest.raises(AIBackendError, match="Request failed"):
            anthropic_backend.generate_schema("Track customers")
        with pytest.raises(AIBackendError, match="Request failed"):
            openai_backend.generate_schema("Track invoices")

    def test_unexpected_reply_maps_to_backend_error(self):
        """Replies of the wrong shape are backend failures"""
        client = Mock()
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        backend = OpenAIBackend("key", "gpt", client=client)

        with pytest.raises(AIBackendError, match="Unexpected response structure"):
            backend.generate_schema("Track invoices")

    def test_reply_without_json_maps_to_backend_error(self):
        """Prose-only replies are backend failures"""
        backend = AnthropicBackend("key", "claude", client=anthropic_client("I cannot help with that"))

        with pytest.raises(AIBackendError):
            backend.generate_schema("Track customers")

    def test_create_backends_order(self):
        """Backends are created in the configured order"""
        config = AIConfig(backend_order=["openai", "anthropic"])

        backends = create_backends(config)

        assert [b.name for b in backends] == ["openai", "anthropic"]

    def test_create_backends_unknown(self):
        """Unknown backend names are rejected"""
        with pytest.raises(ValueError):
            create_backends(AIConfig(backend_order=["gemini"]))
