"""Model-id routing: pick the provider IO service and capabilities for a Bedrock model."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from bedrockio.llm.errors import RegistryValidationError, UnsupportedModelError, UnsupportedOperationError
from bedrockio.llm.interfaces import BedrockModelIO
from bedrockio.llm.providers import (
    AI21JambaIO,
    AI21JurassicIO,
    AmazonTitanIO,
    AnthropicClaudeIO,
    CohereCommandRIO,
    CohereEmbedIO,
    MetaLlamaIO,
    MistralIO,
    StabilityDiffusionIO,
)
from bedrockio.llm.types import Capability, ModelIdentifier

TEXT_AND_CHAT = frozenset(
    {Capability.TEXT_GENERATION, Capability.TEXT_STREAMING, Capability.CHAT, Capability.CHAT_STREAMING}
)


@dataclass(frozen=True)
class ModelRoute:
    """One registered provider/family prefix bound to its IO service.

    Routes returned by :meth:`ModelRegistry.lookup` also carry the parsed
    ``identifier`` of the model id that matched.
    """

    provider: str
    family_prefix: str
    io: BedrockModelIO
    capabilities: FrozenSet[Capability]
    identifier: Optional[ModelIdentifier] = None

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability) -> "ModelRoute":
        """Return self or raise when the route lacks ``capability``."""
        if capability not in self.capabilities:
            raise UnsupportedOperationError(self.provider, capability.value)
        return self


def _cfg_value(settings: Any, key: str, default: Optional[str] = None) -> Optional[str]:
    """Read one normalized string setting from object/dict/env sources."""
    if settings is None:
        value = None
    elif isinstance(settings, dict):
        value = settings.get(key)
    else:
        value = getattr(settings, key, None)
    text = str(value or "").strip()
    if text:
        return text
    env_val = os.environ.get(key.upper())
    if env_val and env_val.strip():
        return env_val.strip()
    return default


class ModelRegistry:
    """Provider/family prefix table; read-only once built."""

    def __init__(self, routes: Optional[Iterable[ModelRoute]] = None) -> None:
        self._routes: Dict[str, List[ModelRoute]] = {}
        for route in routes or []:
            self.register(route)

    def register(self, route: ModelRoute) -> ModelRoute:
        """Validate and add one route; longer family prefixes win on lookup."""
        provider = route.provider.strip().lower()
        prefix = route.family_prefix.strip().lower()
        if not provider or not prefix:
            raise RegistryValidationError("Routes need a provider and a family prefix")
        if route.io.provider != provider:
            raise RegistryValidationError(
                f"IO service for '{route.io.provider}' registered under provider '{provider}'"
            )
        missing = [cap.value for cap in route.capabilities if not type(route.io).implements(cap)]
        if missing:
            raise RegistryValidationError(
                f"{type(route.io).__name__} does not implement {', '.join(sorted(missing))} "
                f"declared for '{provider}.{prefix}'"
            )
        normalized = replace(route, provider=provider, family_prefix=prefix, capabilities=frozenset(route.capabilities))
        bucket = [item for item in self._routes.get(provider, []) if item.family_prefix != prefix]
        bucket.append(normalized)
        bucket.sort(key=lambda item: len(item.family_prefix), reverse=True)
        self._routes[provider] = bucket
        return normalized

    @property
    def providers(self) -> Tuple[str, ...]:
        return tuple(sorted(self._routes))

    def routes(self) -> List[ModelRoute]:
        return [route for provider in self.providers for route in self._routes[provider]]

    def lookup(self, model_id: str) -> ModelRoute:
        """Resolve a model id to its route or raise :class:`UnsupportedModelError`."""
        identifier = ModelIdentifier.parse(model_id)
        bucket = self._routes.get(identifier.provider)
        if not bucket:
            raise UnsupportedModelError(identifier.raw, f"unknown provider '{identifier.provider}'")
        for route in bucket:
            if identifier.family.startswith(route.family_prefix):
                return replace(route, identifier=identifier)
        raise UnsupportedModelError(identifier.raw, f"unknown {identifier.provider} model family '{identifier.family}'")

    def resolve(self, model_id: str, capability: Capability) -> ModelRoute:
        return self.lookup(model_id).require(capability)


def default_registry() -> ModelRegistry:
    """Routes for every provider family the layer knows how to encode."""
    titan = AmazonTitanIO()
    command_r = CohereCommandRIO()
    mistral = MistralIO()
    return ModelRegistry(
        [
            ModelRoute("amazon", "titan-embed", titan, frozenset({Capability.EMBEDDING})),
            ModelRoute("amazon", "titan-", titan, TEXT_AND_CHAT),
            ModelRoute("anthropic", "claude", AnthropicClaudeIO(), TEXT_AND_CHAT),
            ModelRoute("cohere", "command-r", command_r, TEXT_AND_CHAT),
            ModelRoute("cohere", "embed-", CohereEmbedIO(), frozenset({Capability.EMBEDDING})),
            ModelRoute("meta", "llama", MetaLlamaIO(), TEXT_AND_CHAT),
            ModelRoute("mistral", "mistral", mistral, TEXT_AND_CHAT),
            ModelRoute("mistral", "mixtral", mistral, TEXT_AND_CHAT),
            ModelRoute("ai21", "jamba", AI21JambaIO(), TEXT_AND_CHAT),
            ModelRoute("ai21", "j2-", AI21JurassicIO(), frozenset({Capability.TEXT_GENERATION})),
            ModelRoute("stability", "stable-diffusion", StabilityDiffusionIO(), frozenset({Capability.TEXT_TO_IMAGE})),
        ]
    )
