"""Invocation clients that wire registry routes, provider IO and the invoker together."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from bedrockio.core.logging_utils import log_event
from bedrockio.llm.errors import BedrockProviderError, InvalidParameterError, InvocationError
from bedrockio.llm.interfaces import BedrockInvoker, encode_body, read_json
from bedrockio.llm.messages import converse_stream_text, parse_converse_response
from bedrockio.llm.router import ModelRegistry, ModelRoute, _cfg_value, default_registry
from bedrockio.llm.settings import Settings
from bedrockio.llm.types import (
    Capability,
    ChatMessageContent,
    EmbeddingVector,
    ImageResult,
    MessageLike,
    TextContent,
)

ACCEPT = "*/*"
CONTENT_TYPE = "application/json"


def _is_truthy(value: Any) -> bool:
    """Normalize truthy config values."""
    text = str(value or "").strip().lower()
    return text in {"1", "true", "yes", "y", "on"}


def _cfg_flag(settings: Any, key: str, default: bool) -> bool:
    """Read one boolean setting; explicit bools win over string parsing."""
    value = settings.get(key) if isinstance(settings, dict) else getattr(settings, key, None)
    if isinstance(value, bool):
        return value
    text = _cfg_value(settings, key)
    return default if text is None else _is_truthy(text)


@dataclass
class _BoundClient:
    """Shared state for one model id bound to one route."""

    model_id: str
    invoker: BedrockInvoker
    registry: Optional[ModelRegistry] = None
    strict: bool = False
    log_events: bool = True
    route: ModelRoute = field(init=False)

    capability = Capability.TEXT_GENERATION

    def __post_init__(self) -> None:
        """Resolve the route once so unsupported models fail before any network call."""
        registry = self.registry or default_registry()
        self.route = registry.resolve(self.model_id, self.capability)

    def _log(self, event: str, payload: Dict[str, Any]) -> None:
        """Emit one event tagged with the model id and provider."""
        if self.log_events:
            log_event(event, {"model_id": self.model_id, "provider": self.route.provider, **payload})

    def _failed(self, operation: str, exc: Exception) -> InvocationError:
        """Log an invoker failure and wrap it as an InvocationError."""
        self._log("bedrock_invoke_error", {"operation": operation, "error": str(exc), "error_type": type(exc).__name__})
        return InvocationError(self.model_id, str(exc) or type(exc).__name__)

    def _invoke(self, payload: Dict[str, Any]) -> bytes:
        """Send one InvokeModel request and return the raw body."""
        try:
            return self.invoker.invoke_model(
                model_id=self.model_id, accept=ACCEPT, content_type=CONTENT_TYPE, body=encode_body(payload)
            )
        except BedrockProviderError:
            raise
        except Exception as exc:
            raise self._failed("invoke_model", exc) from exc

    def _invoke_stream(self, payload: Dict[str, Any]) -> Iterator[bytes]:
        """Yield raw stream chunks, wrapping invoker failures."""
        try:
            chunks = self.invoker.invoke_model_stream(
                model_id=self.model_id, accept=ACCEPT, content_type=CONTENT_TYPE, body=encode_body(payload)
            )
            for chunk in chunks:
                yield chunk
        except BedrockProviderError:
            raise
        except Exception as exc:
            raise self._failed("invoke_model_stream", exc) from exc

    def _converse(self, request: Dict[str, Any]) -> Any:
        """Send one Converse request."""
        try:
            return self.invoker.converse(request)
        except BedrockProviderError:
            raise
        except Exception as exc:
            raise self._failed("converse", exc) from exc

    def _converse_stream(self, request: Dict[str, Any]) -> Iterator[Any]:
        """Yield converse stream events, wrapping invoker failures."""
        try:
            for event in self.invoker.converse_stream(request):
                yield event
        except BedrockProviderError:
            raise
        except Exception as exc:
            raise self._failed("converse_stream", exc) from exc


@dataclass
class TextGenerationClient(_BoundClient):
    """Prompt-in, text-out generation over InvokeModel."""

    capability = Capability.TEXT_GENERATION

    def generate(self, prompt: str, settings: Settings = None) -> List[TextContent]:
        """Run one encode, invoke and decode round trip for a prompt."""
        payload = self.route.io.build_text_request(self.model_id, prompt, settings)
        body = self._invoke(payload)
        results = self.route.io.parse_text_response(self.model_id, body, strict=self.strict)
        for item in results:
            discarded = item.metadata.get("discarded_candidates")
            if discarded:
                self._log("bedrock_candidates_discarded", {"discarded": discarded})
        return results

    def stream(self, prompt: str, settings: Settings = None) -> Iterator[TextContent]:
        """Yield one TextContent per chunk that carries a text fragment."""
        route = self.route.require(Capability.TEXT_STREAMING)
        payload = route.io.build_text_request(self.model_id, prompt, settings)
        return self._stream_fragments(payload)

    def _stream_fragments(self, payload: Dict[str, Any]) -> Iterator[TextContent]:
        """Decode each raw chunk into at most one text fragment."""
        for raw in self._invoke_stream(payload):
            fragment = self.route.io.extract_stream_text(read_json(raw, strict=self.strict))
            if fragment is not None:
                yield TextContent(text=fragment, model_id=self.model_id)


@dataclass
class ChatCompletionClient(_BoundClient):
    """Chat history in, assistant messages out, over the Converse API."""

    capability = Capability.CHAT

    def complete(self, history: Iterable[MessageLike], settings: Settings = None) -> List[ChatMessageContent]:
        """Send the history through Converse and decode the assistant reply."""
        request = self.route.io.build_converse_request(self.model_id, history, settings)
        return parse_converse_response(self._converse(request), self.model_id)

    def stream(self, history: Iterable[MessageLike], settings: Settings = None) -> Iterator[ChatMessageContent]:
        """Yield one ChatMessageContent per converse delta that carries text."""
        route = self.route.require(Capability.CHAT_STREAMING)
        request = route.io.build_converse_request(self.model_id, history, settings)
        return self._stream_fragments(request)

    def _stream_fragments(self, request: Dict[str, Any]) -> Iterator[ChatMessageContent]:
        """Keep only converse events that carry a text delta."""
        for event in self._converse_stream(request):
            fragment = converse_stream_text(event)
            if fragment is not None:
                yield ChatMessageContent(role="assistant", content=fragment, model_id=self.model_id)


@dataclass
class EmbeddingClient(_BoundClient):
    """One InvokeModel round trip per input text, in order, stopping at the first failure."""

    capability = Capability.EMBEDDING

    def embed(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        """Embed each text in order; the first failure aborts the batch."""
        if isinstance(texts, str):
            texts = [texts]
        if not texts:
            raise InvalidParameterError("At least one text is required for embedding generation")
        vectors: List[EmbeddingVector] = []
        for text in texts:
            payload = self.route.io.build_embedding_request(self.model_id, text)
            body = self._invoke(payload)
            vectors.append(self.route.io.parse_embedding_response(body, strict=self.strict))
        return vectors


@dataclass
class TextToImageClient(_BoundClient):
    """Text description in, one base64 image (or a failure sentinel) out."""

    capability = Capability.TEXT_TO_IMAGE

    def generate_image(self, description: str, width: int, height: int, settings: Settings = None) -> ImageResult:
        """Validate the size, then encode, invoke and decode one image request."""
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidParameterError(f"Image {name} must be a positive integer, got {value!r}")
        payload = self.route.io.build_image_request(self.model_id, description, width, height, settings)
        result = self.route.io.parse_image_response(self._invoke(payload), strict=self.strict)
        if not result.ok:
            self._log("bedrock_image_failed", {"status": result.status.value, "finish_reason": result.finish_reason})
        return result


@dataclass
class BedrockRuntime:
    """Clients for the configured default models."""

    text: Optional[TextGenerationClient] = None
    chat: Optional[ChatCompletionClient] = None
    embeddings: Optional[EmbeddingClient] = None
    image: Optional[TextToImageClient] = None


def build_bedrock_runtime(
    settings: Any,
    invoker: Optional[BedrockInvoker] = None,
    registry: Optional[ModelRegistry] = None,
) -> BedrockRuntime:
    """Build one client per configured model; an empty model setting leaves that client unset."""
    if invoker is None:
        from bedrockio.llm.bedrock_invoker import Boto3BedrockInvoker

        invoker = Boto3BedrockInvoker.from_settings(settings)
    registry = registry or default_registry()
    strict = _cfg_flag(settings, "strict_decoding", False)
    log_events = _cfg_flag(settings, "log_events", True)

    def _bind(client_cls: type, key: str) -> Any:
        """Build one client for the configured model, or None when unset."""
        model_id = _cfg_value(settings, key)
        if not model_id:
            return None
        return client_cls(model_id=model_id, invoker=invoker, registry=registry, strict=strict, log_events=log_events)

    return BedrockRuntime(
        text=_bind(TextGenerationClient, "text_model"),
        chat=_bind(ChatCompletionClient, "chat_model"),
        embeddings=_bind(EmbeddingClient, "embedding_model"),
        image=_bind(TextToImageClient, "image_model"),
    )
