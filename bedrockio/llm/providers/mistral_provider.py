"""Mistral AI text and chat IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.messages import build_converse_request, build_inference_config
from bedrockio.llm.settings import Settings, drop_unset, materialize, setting
from bedrockio.llm.types import MessageLike, TextContent


@dataclass(frozen=True)
class MistralSettings:
    """Mistral sampling parameters; ``top_k`` and ``stop`` are sent only when set."""

    temperature: float = setting("temperature", 0.5)
    top_p: float = setting("top_p", 0.9)
    top_k: Optional[int] = setting("top_k", None, "int")
    max_tokens: int = setting("max_tokens", 512)
    stop: Optional[List[str]] = setting("stop", None, "str_list")


def _first_output(chunk: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    outputs = chunk.get("outputs")
    if isinstance(outputs, list) and outputs and isinstance(outputs[0], Mapping):
        return outputs[0]
    return None


class MistralIO(BedrockModelIO):
    """IO service for Mistral and Mixtral models."""

    provider = "mistral"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Encode a prompt as a Mistral InvokeModel body."""
        exec_settings = materialize(MistralSettings, settings)
        return drop_unset(
            {
                "prompt": prompt,
                "max_tokens": exec_settings.max_tokens,
                "temperature": exec_settings.temperature,
                "top_p": exec_settings.top_p,
                "top_k": exec_settings.top_k,
                "stop": exec_settings.stop,
            }
        )

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Decode every entry of ``outputs`` in order."""
        payload = read_json(body, strict=strict)
        return [
            TextContent(text=str(item.get("text") or ""), model_id=model_id, finish_reason=item.get("stop_reason"))
            for item in payload.get("outputs") or []
            if isinstance(item, Mapping) and item.get("text")
        ]

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        """Return the text of the first output in one stream chunk."""
        output = _first_output(chunk)
        if output is None or not output.get("text"):
            return None
        return str(output["text"])

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        """Build a converse request; ``top_k`` travels as an extra field."""
        exec_settings = materialize(MistralSettings, settings)
        inference = build_inference_config(
            temperature=exec_settings.temperature,
            top_p=exec_settings.top_p,
            max_tokens=exec_settings.max_tokens,
            stop_sequences=exec_settings.stop,
        )
        additional = drop_unset({"top_k": exec_settings.top_k})
        return build_converse_request(model_id, history, inference, additional_fields=additional)
