"""Chat-history translation into Bedrock converse message blocks."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import InvalidParameterError
from .types import ChatMessage, ChatMessageContent, MessageLike, as_chat_message

CONVERSE_ROLES = {"user": "user", "assistant": "assistant"}


def map_role(role: str) -> str:
    """Map a chat role to its converse role; system turns have no converse role."""
    normalized = str(role or "").strip().lower()
    if normalized in CONVERSE_ROLES:
        return CONVERSE_ROLES[normalized]
    raise InvalidParameterError(f"Unsupported chat role '{role}'")


def _messages(history: Iterable[MessageLike]) -> List[ChatMessage]:
    out = [as_chat_message(m) for m in history]
    for message in out:
        if message.role != "system":
            map_role(message.role)
    return out


def build_message_list(history: Iterable[MessageLike]) -> List[Dict[str, Any]]:
    """Converse ``messages``: user/assistant turns only, in order."""
    return [
        {"role": map_role(m.role), "content": [{"text": m.content}]}
        for m in _messages(history)
        if m.role != "system"
    ]


def get_system_messages(history: Iterable[MessageLike]) -> List[Dict[str, str]]:
    """Converse ``system`` blocks, kept out of the main message list."""
    return [{"text": m.content} for m in _messages(history) if m.role == "system"]


def build_inference_config(
    *,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
    max_tokens: Optional[int] = None,
    stop_sequences: Optional[List[str]] = None,
) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    if temperature is not None:
        config["temperature"] = temperature
    if top_p is not None:
        config["topP"] = top_p
    if max_tokens is not None:
        config["maxTokens"] = max_tokens
    if stop_sequences is not None:
        config["stopSequences"] = list(stop_sequences)
    return config


def build_converse_request(
    model_id: str,
    history: Iterable[MessageLike],
    inference_config: Mapping[str, Any],
    *,
    additional_fields: Optional[Mapping[str, Any]] = None,
    tool_config: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Assemble the converse-style request shared by every chat-capable provider."""
    history = list(history)
    request: Dict[str, Any] = {
        "modelId": model_id,
        "messages": build_message_list(history),
        "system": get_system_messages(history),
        "inferenceConfig": dict(inference_config),
        "additionalModelRequestFields": dict(additional_fields or {}),
    }
    if tool_config is not None:
        request["toolConfig"] = dict(tool_config)
    return request


def parse_converse_response(response: Mapping[str, Any], model_id: str) -> List[ChatMessageContent]:
    """One ChatMessageContent per text block of the converse output message."""
    output = response.get("output") if isinstance(response, Mapping) else None
    message = output.get("message") if isinstance(output, Mapping) else None
    if not isinstance(message, Mapping):
        return []
    role = str(message.get("role") or "assistant")
    finish_reason = response.get("stopReason")
    usage = response.get("usage")
    results: List[ChatMessageContent] = []
    for block in message.get("content") or []:
        if not isinstance(block, Mapping):
            continue
        text = block.get("text")
        if text is None:
            continue
        results.append(
            ChatMessageContent(
                role=role,
                content=str(text),
                model_id=model_id,
                finish_reason=str(finish_reason) if finish_reason else None,
                metadata={"usage": dict(usage)} if isinstance(usage, Mapping) else {},
            )
        )
    return results


def converse_stream_text(event: Mapping[str, Any]) -> Optional[str]:
    """Text fragment carried by one converse-stream event, if any."""
    delta_event = event.get("contentBlockDelta") if isinstance(event, Mapping) else None
    if not isinstance(delta_event, Mapping):
        return None
    delta = delta_event.get("delta")
    if not isinstance(delta, Mapping):
        return None
    text = delta.get("text")
    return str(text) if text else None
