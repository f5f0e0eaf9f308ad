"""Unit tests for model-id parsing and capability dispatch."""

from __future__ import annotations

import pytest

from bedrockio.llm.errors import RegistryValidationError, UnsupportedModelError, UnsupportedOperationError
from bedrockio.llm.interfaces import BedrockModelIO
from bedrockio.llm.providers import (
    AI21JurassicIO,
    AmazonTitanIO,
    AnthropicClaudeIO,
    CohereCommandRIO,
    CohereEmbedIO,
    MistralIO,
    StabilityDiffusionIO,
)
from bedrockio.llm.router import ModelRegistry, ModelRoute, default_registry
from bedrockio.llm.types import Capability, ModelIdentifier


def test_model_identifier_parse_splits_provider_family_and_version():
    ident = ModelIdentifier.parse("amazon.titan-embed-text-v2:0")
    assert ident.provider == "amazon"
    assert ident.family == "titan-embed-text-v2"
    assert ident.version == "0"
    assert ident.region_prefix is None


def test_model_identifier_parse_strips_cross_region_prefix():
    ident = ModelIdentifier.parse("us.anthropic.claude-3-haiku-20240307-v1:0")
    assert ident.region_prefix == "us"
    assert ident.provider == "anthropic"
    assert ident.base_id == "anthropic.claude-3-haiku-20240307-v1:0"


@pytest.mark.parametrize("model_id", ["titan", "", ".claude", "anthropic."])
def test_model_identifier_parse_rejects_malformed_ids(model_id):
    with pytest.raises(UnsupportedModelError):
        ModelIdentifier.parse(model_id)


@pytest.mark.parametrize(
    "model_id,io_cls",
    [
        ("amazon.titan-text-express-v1", AmazonTitanIO),
        ("amazon.titan-embed-text-v1", AmazonTitanIO),
        ("anthropic.claude-v2:1", AnthropicClaudeIO),
        ("cohere.command-r-plus-v1:0", CohereCommandRIO),
        ("cohere.embed-english-v3", CohereEmbedIO),
        ("mistral.mixtral-8x7b-instruct-v0:1", MistralIO),
        ("ai21.j2-ultra-v1", AI21JurassicIO),
        ("stability.stable-diffusion-xl-v1", StabilityDiffusionIO),
    ],
)
def test_default_registry_routes_known_families(model_id, io_cls):
    route = default_registry().lookup(model_id)
    assert isinstance(route.io, io_cls)
    assert route.identifier.raw == model_id


def test_titan_embedding_family_wins_over_text_prefix():
    registry = default_registry()
    assert registry.lookup("amazon.titan-embed-text-v2:0").capabilities == frozenset({Capability.EMBEDDING})
    assert Capability.CHAT in registry.lookup("amazon.titan-text-premier-v1:0").capabilities


@pytest.mark.parametrize("model_id", ["openai.gpt-4", "amazon.nova-pro-v1:0", "cohere.command-text-v14"])
def test_lookup_unknown_provider_or_family_raises(model_id):
    with pytest.raises(UnsupportedModelError) as exc:
        default_registry().lookup(model_id)
    assert exc.value.model_id == model_id


def test_resolve_raises_unsupported_operation_for_missing_capability():
    with pytest.raises(UnsupportedOperationError) as exc:
        default_registry().resolve("stability.stable-diffusion-xl-v1", Capability.CHAT)
    assert exc.value.provider == "stability"
    assert exc.value.capability == "chat"


def test_register_rejects_capability_without_implementation():
    registry = ModelRegistry()
    with pytest.raises(RegistryValidationError):
        registry.register(ModelRoute("stability", "sd3", StabilityDiffusionIO(), frozenset({Capability.CHAT})))


def test_register_rejects_provider_mismatch():
    with pytest.raises(RegistryValidationError):
        ModelRegistry([ModelRoute("meta", "claude", AnthropicClaudeIO(), frozenset({Capability.CHAT}))])


def test_register_adds_custom_family():
    class EchoIO(BedrockModelIO):
        provider = "acme"

        def build_text_request(self, model_id, prompt, settings=None):
            return {"prompt": prompt}

        def parse_text_response(self, model_id, body, *, strict=False):
            return []

    registry = default_registry()
    registry.register(ModelRoute("acme", "echo", EchoIO(), frozenset({Capability.TEXT_GENERATION})))
    assert "acme" in registry.providers
    assert registry.resolve("acme.echo-v1", Capability.TEXT_GENERATION).io.provider == "acme"


def test_unimplemented_io_operation_raises_distinct_error():
    with pytest.raises(UnsupportedOperationError):
        CohereEmbedIO().build_text_request("cohere.embed-english-v3", "hi")
    with pytest.raises(UnsupportedOperationError):
        AmazonTitanIO().build_image_request("amazon.titan-text-express-v1", "a cat", 512, 512)
