"""Cohere Command R (text, chat, tools) and Cohere Embed IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.messages import build_converse_request, build_inference_config, map_role
from bedrockio.llm.settings import Settings, drop_unset, materialize, setting
from bedrockio.llm.types import ChatMessage, EmbeddingVector, MessageLike, TextContent, as_chat_message

LEGACY_ROLES = {"user": "USER", "assistant": "CHATBOT"}


@dataclass(frozen=True)
class CommandRSettings:
    """Command R parameters; unset optional fields never reach the wire."""

    temperature: float = setting("temperature", 0.3)
    p: float = setting("p", 0.75)
    k: float = setting("k", 0.0)
    max_tokens: int = setting("max_tokens", 512)
    prompt_truncation: str = setting("prompt_truncation", "OFF")
    frequency_penalty: float = setting("frequency_penalty", 0.0)
    presence_penalty: float = setting("presence_penalty", 0.0)
    seed: Optional[int] = setting("seed", None, "int")
    return_prompt: bool = setting("return_prompt", False)
    raw_prompting: bool = setting("raw_prompting", False)
    stop_sequences: Optional[List[str]] = setting("stop_sequences", None, "str_list")
    tools: Optional[List[Any]] = setting("tools", None, "list")
    tool_results: Optional[List[Any]] = setting("tool_results", None, "list")
    preamble: Optional[str] = setting("preamble", None, "str")
    documents: Optional[List[Any]] = setting("documents", None, "list")
    search_queries_only: Optional[bool] = setting("search_queries_only", None, "bool")

    def legacy_fields(self) -> Dict[str, Any]:
        """Parameters shared by the invoke body and the converse extra fields."""
        return drop_unset(
            {
                "k": self.k,
                "prompt_truncation": self.prompt_truncation,
                "frequency_penalty": self.frequency_penalty,
                "presence_penalty": self.presence_penalty,
                "seed": self.seed,
                "return_prompt": self.return_prompt,
                "raw_prompting": self.raw_prompting,
                "stop_sequences": self.stop_sequences,
                "tools": self.tools,
                "tool_results": self.tool_results,
                "preamble": self.preamble,
                "documents": self.documents,
                "search_queries_only": self.search_queries_only,
            }
        )


def split_legacy_history(history: Iterable[MessageLike]) -> Tuple[str, List[Dict[str, str]], List[str]]:
    """Split a transcript into (final user message, earlier turns, system texts).

    Only a trailing user turn becomes ``message``; otherwise ``message`` is
    empty and every turn stays in ``chat_history`` in order.
    """
    messages: List[ChatMessage] = [as_chat_message(m) for m in history]
    system = [m.content for m in messages if m.role == "system"]
    turns = [m for m in messages if m.role != "system"]
    message = ""
    if turns and map_role(turns[-1].role) == "user":
        message = turns.pop().content
    chat_history = [{"role": LEGACY_ROLES[map_role(m.role)], "message": m.content} for m in turns]
    return message, chat_history, system


class CohereCommandRIO(BedrockModelIO):
    """IO service for Cohere Command R / R+."""

    provider = "cohere"

    def build_text_request(self, model_id: str, prompt: str, settings: Settings = None) -> Dict[str, Any]:
        """Encode a prompt in the legacy Command R invoke shape."""
        exec_settings = materialize(CommandRSettings, settings)
        body: Dict[str, Any] = {
            "message": prompt,
            "temperature": exec_settings.temperature,
            "p": exec_settings.p,
            "max_tokens": exec_settings.max_tokens,
        }
        body.update(exec_settings.legacy_fields())
        return body

    def parse_text_response(self, model_id: str, body: Any, *, strict: bool = False) -> List[TextContent]:
        """Decode the ``text`` field of a Command R response."""
        payload = read_json(body, strict=strict)
        text = payload.get("text")
        if not text:
            return []
        return [TextContent(text=str(text), model_id=model_id, finish_reason=payload.get("finish_reason"))]

    def extract_stream_text(self, chunk: Mapping[str, Any]) -> Optional[str]:
        """Return the ``text`` fragment of one stream chunk."""
        text = chunk.get("text")
        return str(text) if text else None

    def build_converse_request(
        self, model_id: str, history: Iterable[MessageLike], settings: Settings = None
    ) -> Dict[str, Any]:
        """Converse request carrying the transcript in both converse and legacy shapes."""
        history = list(history)
        exec_settings = materialize(CommandRSettings, settings)
        message, chat_history, system = split_legacy_history(history)
        additional: Dict[str, Any] = {"message": message, "chat_history": chat_history}
        additional.update(exec_settings.legacy_fields())
        if "preamble" not in additional and system:
            additional["preamble"] = "\n".join(system)
        inference = build_inference_config(
            temperature=exec_settings.temperature,
            top_p=exec_settings.p,
            max_tokens=exec_settings.max_tokens,
            stop_sequences=exec_settings.stop_sequences,
        )
        return build_converse_request(model_id, history, inference, additional_fields=additional)


class CohereEmbedIO(BedrockModelIO):
    """IO service for Cohere Embed; these models serve embeddings only."""

    provider = "cohere"

    input_type = "search_document"
    truncate = "END"

    def build_embedding_request(self, model_id: str, text: str) -> Dict[str, Any]:
        """Encode one text as a single-item Cohere embed batch."""
        return {"texts": [text], "input_type": self.input_type, "truncate": self.truncate}

    def parse_embedding_response(self, body: Any, *, strict: bool = False) -> EmbeddingVector:
        """Decode the first embedding (plain or ``float``-keyed), or ``()``."""
        payload = read_json(body, strict=strict)
        embeddings = payload.get("embeddings")
        if isinstance(embeddings, Mapping):
            embeddings = embeddings.get("float")
        if not isinstance(embeddings, list) or not embeddings:
            return ()
        first = embeddings[0]
        if not isinstance(first, list):
            return ()
        return tuple(float(value) for value in first)
