"""Shared pytest fixtures: an in-memory Bedrock invoker standing in for the network."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytest


class FakeInvoker:
    """Records every call and replays canned responses in order."""

    def __init__(
        self,
        *,
        responses: Optional[List[Any]] = None,
        stream_chunks: Optional[List[Any]] = None,
        converse_response: Optional[Mapping[str, Any]] = None,
        converse_events: Optional[List[Mapping[str, Any]]] = None,
        fail_on_call: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.responses = list(responses or [])
        self.stream_chunks = list(stream_chunks or [])
        self.converse_response = converse_response or {}
        self.converse_events = list(converse_events or [])
        self.fail_on_call = fail_on_call
        self.error = error or RuntimeError("service unavailable")
        self.calls: List[Dict[str, Any]] = []

    def _maybe_fail(self) -> None:
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.error

    def invoke_model(self, *, model_id: str, accept: str, content_type: str, body: bytes) -> bytes:
        self.calls.append(
            {"op": "invoke_model", "model_id": model_id, "accept": accept, "content_type": content_type, "body": json.loads(body)}
        )
        self._maybe_fail()
        response = self.responses.pop(0) if self.responses else {}
        if isinstance(response, (bytes, str)):
            return response if isinstance(response, bytes) else response.encode("utf-8")
        return json.dumps(response).encode("utf-8")

    def invoke_model_stream(self, *, model_id: str, accept: str, content_type: str, body: bytes) -> Iterable[bytes]:
        self.calls.append({"op": "invoke_model_stream", "model_id": model_id, "body": json.loads(body)})
        for index, chunk in enumerate(self.stream_chunks):
            if self.fail_on_call is not None and index == self.fail_on_call:
                raise self.error
            yield json.dumps(chunk).encode("utf-8")

    def converse(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        self.calls.append({"op": "converse", "request": dict(request)})
        self._maybe_fail()
        return self.converse_response

    def converse_stream(self, request: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
        self.calls.append({"op": "converse_stream", "request": dict(request)})
        self._maybe_fail()
        return list(self.converse_events)


@pytest.fixture
def fake_invoker_cls():
    return FakeInvoker


@pytest.fixture(autouse=True)
def _quiet_events(monkeypatch):
    """Keep event lines out of test output unless a test opts back in."""
    monkeypatch.setenv("BEDROCK_LOG_EVENTS", "0")
