"""Errors raised by the Bedrock model IO layer."""

from __future__ import annotations

from typing import Optional


class BedrockProviderError(RuntimeError):
    """Base error for provider-layer failures."""


class BedrockConfigurationError(BedrockProviderError):
    """Raised when runtime configuration is invalid or incomplete."""


class UnsupportedModelError(BedrockProviderError):
    """Raised when a model identifier does not map to any known provider/family."""

    def __init__(self, model_id: str, reason: Optional[str] = None) -> None:
        self.model_id = model_id
        message = f"Unsupported model '{model_id}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedOperationError(BedrockProviderError):
    """Raised when a resolved provider cannot serve a requested capability."""

    def __init__(self, provider: str, capability: str) -> None:
        self.provider = provider
        self.capability = capability
        super().__init__(f"Provider '{provider}' does not support capability '{capability}'")


class InvalidParameterError(BedrockProviderError, ValueError):
    """Raised for inputs the layer cannot encode at all (settings are never validated)."""


class InvocationError(BedrockProviderError):
    """Raised when the external invoke call fails; the cause is chained."""

    def __init__(self, model_id: str, message: str) -> None:
        self.model_id = model_id
        super().__init__(f"Invocation of '{model_id}' failed: {message}")


class MalformedResponseError(BedrockProviderError):
    """Raised when strict decoding is enabled and a response body cannot be parsed."""


class RegistryValidationError(BedrockProviderError):
    """Raised when a route declares a capability its IO class does not implement."""
