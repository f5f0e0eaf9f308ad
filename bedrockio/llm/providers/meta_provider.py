"""Meta Llama text and chat IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.messages import build_converse_request, build_inference_config
from bedrockio.llm.settings import Settings, materialize, setting
from bedrockio.llm.types import MessageLike, TextContent


@dataclass(frozen=True)
class LlamaSettings:
    """Llama sampling parameters and their defaults."""

    temperature: float = setting("temperature", 0.5)
    top_p: float = setting("top_p", 0.9)
    max_gen_len: int = setting("max_gen_len", 512)


class MetaLlamaIO(BedrockModelIO):
    """IO service for Meta Llama models."""

    provider = "meta"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Encode a prompt as a Llama InvokeModel body."""
        exec_settings = materialize(LlamaSettings, settings)
        return {
            "prompt": prompt,
            "temperature": exec_settings.temperature,
            "top_p": exec_settings.top_p,
            "max_gen_len": exec_settings.max_gen_len,
        }

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Decode the single ``generation`` of a Llama response."""
        payload = read_json(body, strict=strict)
        generation = payload.get("generation")
        if not generation:
            return []
        return [TextContent(text=str(generation), model_id=model_id, finish_reason=payload.get("stop_reason"))]

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        """Return the ``generation`` fragment of one stream chunk."""
        generation = chunk.get("generation")
        return str(generation) if generation else None

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        """Build a converse request with Llama sampling values."""
        exec_settings = materialize(LlamaSettings, settings)
        inference = build_inference_config(
            temperature=exec_settings.temperature,
            top_p=exec_settings.top_p,
            max_tokens=exec_settings.max_gen_len,
        )
        return build_converse_request(model_id, history, inference)
