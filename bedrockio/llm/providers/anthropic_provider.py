"""Anthropic Claude text and chat IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.messages import build_converse_request, build_inference_config
from bedrockio.llm.settings import Settings, drop_unset, materialize, setting
from bedrockio.llm.types import MessageLike, TextContent

ANTHROPIC_VERSION = "bedrock-2023-05-31"

# Models that reject a toolConfig block (matched on the exact id).
TOOL_UNSUPPORTED_MODELS = frozenset({"anthropic.claude-instant-v1"})


@dataclass(frozen=True)
class ClaudeSettings:
    """Claude sampling parameters and their defaults."""

    temperature: float = setting("temperature", 1.0)
    top_p: float = setting("top_p", 0.999)
    top_k: int = setting("top_k", 250)
    max_tokens_to_sample: int = setting("max_tokens_to_sample", 512)
    stop_sequences: Optional[List[str]] = setting("stop_sequences", None, "str_list")
    tools: Optional[List[Any]] = setting("tools", None, "list")
    tool_choice: Optional[Dict[str, Any]] = setting("tool_choice", None, "dict")


def uses_messages_api(model_id: str) -> bool:
    """Claude 3+ models only accept the Messages body on InvokeModel."""
    return "claude-3" in model_id or "claude-sonnet-4" in model_id or "claude-opus-4" in model_id


def supports_tools(model_id: str) -> bool:
    """False for models that reject a toolConfig block."""
    return model_id not in TOOL_UNSUPPORTED_MODELS


class AnthropicClaudeIO(BedrockModelIO):
    """IO service for Anthropic Claude models."""

    provider = "anthropic"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Encode a prompt as a legacy completion or Messages body."""
        exec_settings = materialize(ClaudeSettings, settings)
        if uses_messages_api(model_id):
            return drop_unset(
                {
                    "anthropic_version": ANTHROPIC_VERSION,
                    "max_tokens": exec_settings.max_tokens_to_sample,
                    "messages": [{"role": "user", "content": [{"type": "text", "text": prompt}]}],
                    "temperature": exec_settings.temperature,
                    "top_p": exec_settings.top_p,
                    "top_k": exec_settings.top_k,
                    "stop_sequences": exec_settings.stop_sequences,
                }
            )
        return drop_unset(
            {
                "prompt": f"\n\nHuman: {prompt}\n\nAssistant:",
                "max_tokens_to_sample": exec_settings.max_tokens_to_sample,
                "temperature": exec_settings.temperature,
                "top_p": exec_settings.top_p,
                "top_k": exec_settings.top_k,
                "stop_sequences": exec_settings.stop_sequences,
            }
        )

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Decode a completion or the text blocks of a Messages response."""
        payload = read_json(body, strict=strict)
        completion = payload.get("completion")
        if completion:
            return [TextContent(text=str(completion), model_id=model_id, finish_reason=payload.get("stop_reason"))]
        parts = [
            str(block.get("text"))
            for block in payload.get("content") or []
            if isinstance(block, Mapping) and block.get("type") == "text" and block.get("text")
        ]
        if not parts:
            return []
        return [TextContent(text="".join(parts), model_id=model_id, finish_reason=payload.get("stop_reason"))]

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        """Return the text carried by one completion or content-block delta."""
        completion = chunk.get("completion")
        if completion:
            return str(completion)
        if chunk.get("type") == "content_block_delta":
            delta = chunk.get("delta")
            if isinstance(delta, Mapping) and delta.get("text"):
                return str(delta["text"])
        return None

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        """Build a converse request; tools are attached only when supplied and supported."""
        exec_settings = materialize(ClaudeSettings, settings)
        inference = build_inference_config(
            temperature=exec_settings.temperature,
            top_p=exec_settings.top_p,
            max_tokens=exec_settings.max_tokens_to_sample,
            stop_sequences=exec_settings.stop_sequences,
        )
        tool_config: Optional[Dict[str, Any]] = None
        if exec_settings.tools and supports_tools(model_id):
            tool_config = {"tools": list(exec_settings.tools)}
            if exec_settings.tool_choice is not None:
                tool_config["toolChoice"] = dict(exec_settings.tool_choice)
        return build_converse_request(model_id, history, inference, tool_config=tool_config)
