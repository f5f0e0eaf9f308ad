"""Amazon Titan text, chat and embedding IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.messages import build_converse_request, build_inference_config
from bedrockio.llm.settings import Settings, materialize, setting
from bedrockio.llm.types import EmbeddingVector, MessageLike, TextContent

EMBEDDING_DIMENSIONS = 512


@dataclass(frozen=True)
class TitanTextSettings:
    """Titan sampling parameters and their defaults."""

    temperature: float = setting("temperature", 0.7)
    top_p: float = setting("topP", 0.9)
    max_token_count: int = setting("maxTokenCount", 512)
    stop_sequences: List[str] = setting("stopSequences", [], "str_list")


class AmazonTitanIO(BedrockModelIO):
    """IO service for the Amazon Titan model family."""

    provider = "amazon"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Encode a prompt as a Titan ``inputText`` body."""
        exec_settings = materialize(TitanTextSettings, settings)
        return {
            "inputText": prompt,
            "textGenerationConfig": {
                "temperature": exec_settings.temperature,
                "topP": exec_settings.top_p,
                "maxTokenCount": exec_settings.max_token_count,
                "stopSequences": list(exec_settings.stop_sequences),
            },
        }

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Return the first result only; how many others were dropped is kept in metadata."""
        payload = read_json(body, strict=strict)
        results = [r for r in (payload.get("results") or []) if isinstance(r, Mapping)]
        if not results:
            return []
        first = results[0]
        metadata: Dict[str, Any] = {}
        if len(results) > 1:
            metadata["discarded_candidates"] = len(results) - 1
        if "inputTextTokenCount" in payload:
            metadata["input_tokens"] = payload.get("inputTextTokenCount")
        return [
            TextContent(
                text=str(first.get("outputText") or ""),
                model_id=model_id,
                finish_reason=first.get("completionReason"),
                metadata=metadata,
            )
        ]

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        """Return the ``outputText`` fragment of one stream chunk."""
        text = chunk.get("outputText")
        return str(text) if text else None

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        """Build a converse request with Titan sampling values."""
        exec_settings = materialize(TitanTextSettings, settings)
        inference = build_inference_config(
            temperature=exec_settings.temperature,
            top_p=exec_settings.top_p,
            max_tokens=exec_settings.max_token_count,
            stop_sequences=exec_settings.stop_sequences,
        )
        return build_converse_request(model_id, history, inference)

    def build_embedding_request(self, model_id: str, text: str) -> Dict[str, Any]:
        """Encode one text for a Titan embedding model."""
        # First-generation embedders reject the dimensions/normalize fields.
        if "v1" in model_id:
            return {"inputText": text}
        return {"inputText": text, "dimensions": EMBEDDING_DIMENSIONS, "normalize": True}

    def parse_embedding_response(self, body: Any, *, strict: bool = False) -> EmbeddingVector:
        """Decode the ``embedding`` vector, or ``()`` when absent."""
        payload = read_json(body, strict=strict)
        embedding = payload.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            return ()
        return tuple(float(value) for value in embedding)
