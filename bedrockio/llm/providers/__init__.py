"""Concrete per-provider IO services."""

from .ai21_provider import AI21JambaIO, AI21JurassicIO
from .amazon_provider import AmazonTitanIO
from .anthropic_provider import AnthropicClaudeIO
from .cohere_provider import CohereCommandRIO, CohereEmbedIO
from .meta_provider import MetaLlamaIO
from .mistral_provider import MistralIO
from .stability_provider import StabilityDiffusionIO

__all__ = [
    "AI21JambaIO",
    "AI21JurassicIO",
    "AmazonTitanIO",
    "AnthropicClaudeIO",
    "CohereCommandRIO",
    "CohereEmbedIO",
    "MetaLlamaIO",
    "MistralIO",
    "StabilityDiffusionIO",
]
