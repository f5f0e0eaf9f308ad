"""Provider IO base class, invoker protocol and capability descriptors."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from .errors import MalformedResponseError, UnsupportedOperationError
from .settings import Settings
from .types import Capability, EmbeddingVector, ImageResult, MessageLike, TextContent

# Methods a provider IO class must override to serve each capability.
CAPABILITY_METHODS: Dict[Capability, Tuple[str, ...]] = {
    Capability.TEXT_GENERATION: ("build_text_request", "parse_text_response"),
    Capability.TEXT_STREAMING: ("build_text_request", "extract_stream_text"),
    Capability.CHAT: ("build_converse_request",),
    Capability.CHAT_STREAMING: ("build_converse_request",),
    Capability.EMBEDDING: ("build_embedding_request", "parse_embedding_response"),
    Capability.TEXT_TO_IMAGE: ("build_image_request", "parse_image_response"),
}


def read_json(body: Any, *, strict: bool = False) -> Dict[str, Any]:
    """Decode a JSON object body; tolerant mode degrades to ``{}``."""
    if isinstance(body, Mapping):
        return dict(body)
    try:
        if isinstance(body, (bytes, bytearray)):
            body = bytes(body).decode("utf-8")
        data = json.loads(body) if body else None
    except (TypeError, ValueError) as exc:
        if strict:
            raise MalformedResponseError(f"Response body is not valid JSON: {exc}") from exc
        return {}
    if not isinstance(data, dict):
        if strict:
            raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")
        return {}
    return data


def encode_body(payload: Mapping[str, Any]) -> bytes:
    """Serialize one request body for the invoke call."""
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


class BedrockModelIO:
    """Per-provider request encoder and response decoder.

    Subclasses override only the operations their models support; every other
    operation raises :class:`UnsupportedOperationError`.
    """

    provider = "unknown"

    def _unsupported(self, capability: Capability) -> UnsupportedOperationError:
        return UnsupportedOperationError(self.provider, capability.value)

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        raise self._unsupported(Capability.TEXT_GENERATION)

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        raise self._unsupported(Capability.TEXT_GENERATION)

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        raise self._unsupported(Capability.TEXT_STREAMING)

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        raise self._unsupported(Capability.CHAT)

    def build_embedding_request(self, model_id: str, text: str) -> Dict[str, Any]:
        raise self._unsupported(Capability.EMBEDDING)

    def parse_embedding_response(self, body: Any, *, strict: bool = False) -> EmbeddingVector:
        raise self._unsupported(Capability.EMBEDDING)

    def build_image_request(
        self, model_id: str, description: str, width: int, height: int, settings: Settings = None
    ) -> Dict[str, Any]:
        raise self._unsupported(Capability.TEXT_TO_IMAGE)

    def parse_image_response(self, body: Any, *, strict: bool = False) -> ImageResult:
        raise self._unsupported(Capability.TEXT_TO_IMAGE)

    @classmethod
    def implements(cls, capability: Capability) -> bool:
        """True when every method backing ``capability`` is overridden."""
        return all(
            getattr(cls, name) is not getattr(BedrockModelIO, name) for name in CAPABILITY_METHODS[capability]
        )


class BedrockInvoker(Protocol):
    """External invoke capability; the layer never retries its failures."""

    def invoke_model(self, *, model_id: str, accept: str, content_type: str, body: bytes) -> bytes:
        """Send one InvokeModel request and return the raw response body."""

    def invoke_model_stream(
        self, *, model_id: str, accept: str, content_type: str, body: bytes
    ) -> Iterable[bytes]:
        """Send one streaming InvokeModel request and yield raw JSON chunks."""

    def converse(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        """Send one Converse request."""

    def converse_stream(self, request: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
        """Send one ConverseStream request and yield stream events."""
