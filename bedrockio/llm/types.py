"""Provider-agnostic datatypes shared by encoders, decoders and clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import UnsupportedModelError

REGION_PREFIXES = frozenset({"us", "eu", "apac", "us-gov", "global"})

EmbeddingVector = Tuple[float, ...]


class Capability(str, Enum):
    """Service capabilities a model route can serve."""

    TEXT_GENERATION = "text_generation"
    TEXT_STREAMING = "text_streaming"
    CHAT = "chat"
    CHAT_STREAMING = "chat_streaming"
    EMBEDDING = "embedding"
    TEXT_TO_IMAGE = "text_to_image"


@dataclass(frozen=True)
class ModelIdentifier:
    """Parsed ``<provider>.<family>[-<variant>][:<version>]`` model id."""

    raw: str
    provider: str
    family: str
    version: Optional[str] = None
    region_prefix: Optional[str] = None

    @property
    def base_id(self) -> str:
        """Model id without any cross-region inference-profile prefix."""
        if self.region_prefix:
            return self.raw[len(self.region_prefix) + 1 :]
        return self.raw

    @classmethod
    def parse(cls, model_id: str) -> "ModelIdentifier":
        text = str(model_id or "").strip()
        if "." not in text:
            raise UnsupportedModelError(text, "expected '<provider>.<model>'")
        provider, _, rest = text.partition(".")
        region_prefix: Optional[str] = None
        if provider.lower() in REGION_PREFIXES and "." in rest:
            region_prefix = provider
            provider, _, rest = rest.partition(".")
        if not provider or not rest:
            raise UnsupportedModelError(text, "empty provider or model family")
        family, sep, version = rest.partition(":")
        return cls(
            raw=text,
            provider=provider.lower(),
            family=family.lower(),
            version=version if sep else None,
            region_prefix=region_prefix,
        )


@dataclass(frozen=True)
class ChatMessage:
    """One chat turn; the role is stored stripped and lowercased."""

    role: str
    content: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", str(self.role or "").strip().lower())


MessageLike = Union[ChatMessage, Mapping[str, Any]]


def as_chat_message(message: MessageLike) -> ChatMessage:
    """Accept a ChatMessage or a ``{"role", "content"}`` mapping."""
    if isinstance(message, ChatMessage):
        return message
    return ChatMessage(
        role=str(message.get("role") or ""),
        content=str(message.get("content") or ""),
    )


class ChatHistory:
    """Ordered chat transcript consumed read-only by the encoders."""

    def __init__(self, messages: Optional[List[MessageLike]] = None) -> None:
        self._messages: List[ChatMessage] = [as_chat_message(m) for m in (messages or [])]

    def add_message(self, role: str, content: str) -> "ChatHistory":
        self._messages.append(ChatMessage(role=role, content=content))
        return self

    def add_system_message(self, content: str) -> "ChatHistory":
        return self.add_message("system", content)

    def add_user_message(self, content: str) -> "ChatHistory":
        return self.add_message("user", content)

    def add_assistant_message(self, content: str) -> "ChatHistory":
        return self.add_message("assistant", content)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))

    def __len__(self) -> int:
        return len(self._messages)


@dataclass(frozen=True)
class TextContent:
    """Normalized text-generation output."""

    text: str
    model_id: str
    finish_reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatMessageContent:
    """Normalized chat-completion output message."""

    role: str
    content: str
    model_id: str
    finish_reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class ImageStatus(str, Enum):
    """Outcome of one text-to-image call."""

    NO_DATA = "no_data"
    INVALID = "invalid"
    FAILED = "failed"
    SUCCESS = "success"


NO_IMAGE_DATA_MESSAGE = "No image data received."
INVALID_IMAGE_MESSAGE = "Image generation failed: Invalid response."


@dataclass(frozen=True)
class ImageResult:
    """Tagged text-to-image outcome.

    Only ``SUCCESS`` results carry image bytes; every other status exposes a
    human-readable ``message`` and ``base64`` stays ``None``.
    """

    status: ImageStatus
    base64: Optional[str] = None
    finish_reason: Optional[str] = None
    seed: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is ImageStatus.SUCCESS

    @property
    def message(self) -> str:
        """Base64 image on success, otherwise the matching failure sentinel."""
        if self.status is ImageStatus.SUCCESS:
            return self.base64 or ""
        if self.status is ImageStatus.NO_DATA:
            return NO_IMAGE_DATA_MESSAGE
        if self.status is ImageStatus.INVALID:
            return INVALID_IMAGE_MESSAGE
        return f"Image generation failed: {self.finish_reason}"

    def __str__(self) -> str:
        return self.message
