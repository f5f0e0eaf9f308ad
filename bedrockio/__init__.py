"""bedrockio package exports for the Bedrock model IO layer."""

from .llm import (
    ChatCompletionClient,
    EmbeddingClient,
    TextGenerationClient,
    TextToImageClient,
    build_bedrock_runtime,
    default_registry,
)

__all__ = [
    "ChatCompletionClient",
    "EmbeddingClient",
    "TextGenerationClient",
    "TextToImageClient",
    "build_bedrock_runtime",
    "default_registry",
]
