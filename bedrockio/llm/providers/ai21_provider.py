"""AI21 Labs Jamba (text, chat, streaming) and Jurassic-2 (text only) IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.messages import build_converse_request, build_inference_config
from bedrockio.llm.settings import Settings, drop_unset, materialize, setting
from bedrockio.llm.types import MessageLike, TextContent

PENALTY_KEYS = (
    "scale",
    "applyToWhitespaces",
    "applyToPunctuations",
    "applyToNumbers",
    "applyToStopwords",
    "applyToEmojis",
)


@dataclass(frozen=True)
class JambaSettings:
    """Jamba chat-completions parameters and their defaults."""

    temperature: float = setting("temperature", 1.0)
    top_p: float = setting("top_p", 1.0)
    max_tokens: int = setting("max_tokens", 4096)
    stop: Optional[List[str]] = setting("stop", None, "str_list")
    n: Optional[int] = setting("n", None, "int")
    frequency_penalty: Optional[float] = setting("frequency_penalty", None, "float")
    presence_penalty: Optional[float] = setting("presence_penalty", None, "float")


@dataclass(frozen=True)
class JurassicSettings:
    """Jurassic-2 completion parameters and their defaults."""

    temperature: float = setting("temperature", 0.5)
    top_p: float = setting("topP", 0.5)
    max_tokens: int = setting("maxTokens", 200)
    stop_sequences: List[str] = setting("stopSequences", [], "str_list")
    count_penalty: Optional[Dict[str, Any]] = setting("countPenalty", None, "dict")
    presence_penalty: Optional[Dict[str, Any]] = setting("presencePenalty", None, "dict")
    frequency_penalty: Optional[Dict[str, Any]] = setting("frequencyPenalty", None, "dict")


def penalty(value: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Keep only the documented penalty fields; a penalty without a scale is dropped."""
    if not value or "scale" not in value:
        return None
    return {key: value[key] for key in PENALTY_KEYS if value.get(key) is not None}


class AI21JambaIO(BedrockModelIO):
    """IO service for AI21 Jamba models."""

    provider = "ai21"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Wrap the prompt as a single user message in a Jamba body."""
        exec_settings = materialize(JambaSettings, settings)
        return drop_unset(
            {
                "messages": [{"role": "user", "content": prompt}],
                "temperature": exec_settings.temperature,
                "top_p": exec_settings.top_p,
                "max_tokens": exec_settings.max_tokens,
                "stop": exec_settings.stop,
                "n": exec_settings.n,
                "frequency_penalty": exec_settings.frequency_penalty,
                "presence_penalty": exec_settings.presence_penalty,
            }
        )

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Decode ``choices[].message.content`` with each finish reason."""
        payload = read_json(body, strict=strict)
        results: List[TextContent] = []
        for choice in payload.get("choices") or []:
            if not isinstance(choice, Mapping):
                continue
            message = choice.get("message")
            content = message.get("content") if isinstance(message, Mapping) else None
            if content:
                results.append(
                    TextContent(text=str(content), model_id=model_id, finish_reason=choice.get("finish_reason"))
                )
        return results

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        """Return the delta content of the first choice in one stream chunk."""
        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], Mapping):
            return None
        delta = choices[0].get("delta")
        if isinstance(delta, Mapping) and delta.get("content"):
            return str(delta["content"])
        return None

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        """Build a converse request; penalties and ``n`` travel as extra fields."""
        exec_settings = materialize(JambaSettings, settings)
        inference = build_inference_config(
            temperature=exec_settings.temperature,
            top_p=exec_settings.top_p,
            max_tokens=exec_settings.max_tokens,
            stop_sequences=exec_settings.stop,
        )
        additional = drop_unset(
            {
                "n": exec_settings.n,
                "frequency_penalty": exec_settings.frequency_penalty,
                "presence_penalty": exec_settings.presence_penalty,
            }
        )
        return build_converse_request(model_id, history, inference, additional_fields=additional)


class AI21JurassicIO(BedrockModelIO):
    """IO service for AI21 Jurassic-2 completion models."""

    provider = "ai21"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Encode a prompt as a Jurassic-2 body with scaled penalties."""
        exec_settings = materialize(JurassicSettings, settings)
        return drop_unset(
            {
                "prompt": prompt,
                "temperature": exec_settings.temperature,
                "topP": exec_settings.top_p,
                "maxTokens": exec_settings.max_tokens,
                "stopSequences": list(exec_settings.stop_sequences),
                "countPenalty": penalty(exec_settings.count_penalty),
                "presencePenalty": penalty(exec_settings.presence_penalty),
                "frequencyPenalty": penalty(exec_settings.frequency_penalty),
            }
        )

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Decode ``completions[].data.text`` with each finish reason."""
        payload = read_json(body, strict=strict)
        results: List[TextContent] = []
        for completion in payload.get("completions") or []:
            if not isinstance(completion, Mapping):
                continue
            data = completion.get("data")
            text = data.get("text") if isinstance(data, Mapping) else None
            if not text:
                continue
            reason = completion.get("finishReason")
            finish_reason = reason.get("reason") if isinstance(reason, Mapping) else None
            results.append(TextContent(text=str(text), model_id=model_id, finish_reason=finish_reason))
        return results
