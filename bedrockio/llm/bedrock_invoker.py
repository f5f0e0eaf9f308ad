"""boto3-backed implementation of the Bedrock invoke capability."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from bedrockio.llm.errors import BedrockConfigurationError
from bedrockio.llm.router import _cfg_value


def _import_boto3():
    try:
        import boto3  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dependency
        raise BedrockConfigurationError("boto3 is required for Bedrock invocation. Install boto3.") from exc
    return boto3


class Boto3BedrockInvoker:
    """Thin wrapper over a ``bedrock-runtime`` client; never retries on its own."""

    def __init__(
        self,
        *,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        profile_name: Optional[str] = None,
        client: Any = None,
    ) -> None:
        if client is None:
            boto3 = _import_boto3()
            session = boto3.session.Session(profile_name=profile_name) if profile_name else boto3.session.Session()
            kwargs: Dict[str, Any] = {}
            if region_name:
                kwargs["region_name"] = region_name
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = session.client("bedrock-runtime", **kwargs)
        self.client = client

    @classmethod
    def from_settings(cls, settings: Any) -> "Boto3BedrockInvoker":
        """Build from effective config (dict or attribute object) with env fallback."""
        return cls(
            region_name=_cfg_value(settings, "region"),
            endpoint_url=_cfg_value(settings, "endpoint_url"),
            profile_name=_cfg_value(settings, "profile_name"),
        )

    def invoke_model(self, *, model_id: str, accept: str, content_type: str, body: bytes) -> bytes:
        response = self.client.invoke_model(modelId=model_id, accept=accept, contentType=content_type, body=body)
        stream = response["body"]
        return stream.read() if hasattr(stream, "read") else bytes(stream)

    def invoke_model_stream(
        self, *, model_id: str, accept: str, content_type: str, body: bytes
    ) -> Iterator[bytes]:
        response = self.client.invoke_model_with_response_stream(
            modelId=model_id, accept=accept, contentType=content_type, body=body
        )
        for event in response.get("body") or []:
            chunk = event.get("chunk") if isinstance(event, Mapping) else None
            if chunk and chunk.get("bytes"):
                yield chunk["bytes"]

    def converse(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.client.converse(**request)

    def converse_stream(self, request: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
        response = self.client.converse_stream(**request)
        return response.get("stream") or []
