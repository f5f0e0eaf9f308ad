"""Bedrock model IO: per-provider encoders/decoders, routing and invocation clients."""

from bedrockio.llm.errors import (
    BedrockConfigurationError,
    BedrockProviderError,
    InvalidParameterError,
    InvocationError,
    MalformedResponseError,
    RegistryValidationError,
    UnsupportedModelError,
    UnsupportedOperationError,
)
from bedrockio.llm.interfaces import BedrockInvoker, BedrockModelIO
from bedrockio.llm.router import ModelRegistry, ModelRoute, default_registry
from bedrockio.llm.runtime import (
    BedrockRuntime,
    ChatCompletionClient,
    EmbeddingClient,
    TextGenerationClient,
    TextToImageClient,
    build_bedrock_runtime,
)
from bedrockio.llm.settings import materialize, resolve_setting
from bedrockio.llm.types import (
    Capability,
    ChatHistory,
    ChatMessage,
    ChatMessageContent,
    ImageResult,
    ImageStatus,
    ModelIdentifier,
    TextContent,
)

__all__ = [
    "BedrockProviderError",
    "BedrockConfigurationError",
    "UnsupportedModelError",
    "UnsupportedOperationError",
    "InvalidParameterError",
    "InvocationError",
    "MalformedResponseError",
    "RegistryValidationError",
    "BedrockModelIO",
    "BedrockInvoker",
    "ModelRegistry",
    "ModelRoute",
    "default_registry",
    "BedrockRuntime",
    "TextGenerationClient",
    "ChatCompletionClient",
    "EmbeddingClient",
    "TextToImageClient",
    "build_bedrock_runtime",
    "resolve_setting",
    "materialize",
    "Capability",
    "ChatHistory",
    "ChatMessage",
    "ChatMessageContent",
    "ImageResult",
    "ImageStatus",
    "ModelIdentifier",
    "TextContent",
]
