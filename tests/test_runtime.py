"""Unit tests for invocation clients against an in-memory invoker."""

from __future__ import annotations

import json

import pytest

from bedrockio.llm.errors import InvalidParameterError, InvocationError, UnsupportedModelError, UnsupportedOperationError
from bedrockio.llm.runtime import (
    ChatCompletionClient,
    EmbeddingClient,
    TextGenerationClient,
    TextToImageClient,
    build_bedrock_runtime,
)
from bedrockio.llm.types import ChatHistory, ImageStatus


def test_embedding_client_makes_one_call_per_input(fake_invoker_cls):
    invoker = fake_invoker_cls(responses=[{"embedding": [1.0]}, {"embedding": [2.0]}, {"embedding": [3.0]}])
    client = EmbeddingClient(model_id="amazon.titan-embed-text-v2:0", invoker=invoker)
    vectors = client.embed(["a", "b", "c"])
    assert vectors == [(1.0,), (2.0,), (3.0,)]
    assert [call["body"]["inputText"] for call in invoker.calls] == ["a", "b", "c"]
    assert all(call["accept"] == "*/*" and call["content_type"] == "application/json" for call in invoker.calls)


def test_embedding_client_rejects_empty_input(fake_invoker_cls):
    client = EmbeddingClient(model_id="cohere.embed-english-v3", invoker=fake_invoker_cls())
    with pytest.raises(InvalidParameterError):
        client.embed([])


def test_embedding_client_stops_at_first_failure(fake_invoker_cls):
    invoker = fake_invoker_cls(responses=[{"embedding": [1.0]}], fail_on_call=2)
    client = EmbeddingClient(model_id="amazon.titan-embed-text-v1", invoker=invoker)
    with pytest.raises(InvocationError) as exc:
        client.embed(["a", "b", "c"])
    assert exc.value.model_id == "amazon.titan-embed-text-v1"
    assert isinstance(exc.value.__cause__, RuntimeError)
    assert len(invoker.calls) == 2


def test_client_construction_fails_fast_before_any_call(fake_invoker_cls):
    invoker = fake_invoker_cls()
    with pytest.raises(UnsupportedModelError):
        TextGenerationClient(model_id="foo", invoker=invoker)
    with pytest.raises(UnsupportedOperationError):
        EmbeddingClient(model_id="anthropic.claude-v2", invoker=invoker)
    assert invoker.calls == []


def test_text_generation_round_trip(fake_invoker_cls):
    invoker = fake_invoker_cls(responses=[{"generation": "Hello there"}])
    client = TextGenerationClient(model_id="meta.llama3-8b-instruct-v1:0", invoker=invoker)
    results = client.generate("Hi", {"temperature": 0.1})
    assert results[0].text == "Hello there"
    assert invoker.calls[0]["body"]["temperature"] == 0.1


def test_text_generation_logs_discarded_candidates(fake_invoker_cls, monkeypatch, capsys):
    monkeypatch.setenv("BEDROCK_LOG_EVENTS", "1")
    invoker = fake_invoker_cls(responses=[{"results": [{"outputText": "a"}, {"outputText": "b"}]}])
    client = TextGenerationClient(model_id="amazon.titan-text-express-v1", invoker=invoker)
    assert [r.text for r in client.generate("Hi")] == ["a"]
    record = json.loads(capsys.readouterr().err.strip())
    assert record["event"] == "bedrock_candidates_discarded"
    assert record["discarded"] == 1


def test_text_stream_yields_fragments(fake_invoker_cls):
    invoker = fake_invoker_cls(stream_chunks=[{"outputText": "Hel"}, {"index": 0}, {"outputText": "lo"}])
    client = TextGenerationClient(model_id="amazon.titan-text-express-v1", invoker=invoker)
    assert "".join(item.text for item in client.stream("Hi")) == "Hello"


def test_text_stream_unsupported_for_jurassic(fake_invoker_cls):
    client = TextGenerationClient(model_id="ai21.j2-ultra-v1", invoker=fake_invoker_cls())
    with pytest.raises(UnsupportedOperationError):
        client.stream("Hi")


def test_stream_failure_is_wrapped(fake_invoker_cls):
    invoker = fake_invoker_cls(stream_chunks=[{"generation": "a"}, {"generation": "b"}], fail_on_call=1)
    client = TextGenerationClient(model_id="meta.llama3-8b-instruct-v1:0", invoker=invoker)
    stream = client.stream("Hi")
    assert next(stream).text == "a"
    with pytest.raises(InvocationError):
        next(stream)


def test_chat_completion_uses_converse(fake_invoker_cls):
    invoker = fake_invoker_cls(
        converse_response={"output": {"message": {"role": "assistant", "content": [{"text": "Hi!"}]}}, "stopReason": "end_turn"}
    )
    client = ChatCompletionClient(model_id="anthropic.claude-v2", invoker=invoker)
    results = client.complete(ChatHistory().add_user_message("Hello"))
    assert results[0].content == "Hi!"
    assert invoker.calls[0]["request"]["modelId"] == "anthropic.claude-v2"


def test_chat_stream_yields_deltas(fake_invoker_cls):
    invoker = fake_invoker_cls(
        converse_events=[
            {"messageStart": {"role": "assistant"}},
            {"contentBlockDelta": {"delta": {"text": "Hi"}}},
            {"contentBlockDelta": {"delta": {"text": "!"}}},
        ]
    )
    client = ChatCompletionClient(model_id="mistral.mistral-large-2402-v1:0", invoker=invoker)
    assert [m.content for m in client.stream([{"role": "user", "content": "Hello"}])] == ["Hi", "!"]


def test_chat_invoker_error_is_wrapped_with_model_id(fake_invoker_cls):
    invoker = fake_invoker_cls(fail_on_call=1, error=ValueError("throttled"))
    client = ChatCompletionClient(model_id="cohere.command-r-v1:0", invoker=invoker)
    with pytest.raises(InvocationError, match="cohere.command-r-v1:0"):
        client.complete([{"role": "user", "content": "Hi"}])


def test_image_client_returns_sentinel_result(fake_invoker_cls):
    invoker = fake_invoker_cls(responses=[{"artifacts": [{"base64": "abc", "finishReason": "ERROR"}]}])
    client = TextToImageClient(model_id="stability.stable-diffusion-xl-v1", invoker=invoker)
    result = client.generate_image("a cat", 512, 512)
    assert result.status is ImageStatus.FAILED
    assert result.message == "Image generation failed: ERROR"
    assert invoker.calls[0]["body"] == {"text_prompts": [{"text": "a cat"}], "height": 512, "width": 512}


@pytest.mark.parametrize("width,height", [(0, 512), (512, -1), (True, 512)])
def test_image_client_rejects_non_positive_sizes(fake_invoker_cls, width, height):
    invoker = fake_invoker_cls()
    client = TextToImageClient(model_id="stability.stable-diffusion-xl-v1", invoker=invoker)
    with pytest.raises(InvalidParameterError):
        client.generate_image("a cat", width, height)
    assert invoker.calls == []


def test_build_bedrock_runtime_binds_configured_models(fake_invoker_cls):
    runtime = build_bedrock_runtime(
        {
            "text_model": "amazon.titan-text-express-v1",
            "chat_model": "anthropic.claude-v2",
            "embedding_model": "cohere.embed-english-v3",
            "image_model": "",
            "strict_decoding": True,
        },
        invoker=fake_invoker_cls(),
    )
    assert runtime.text.route.provider == "amazon"
    assert runtime.chat.route.provider == "anthropic"
    assert runtime.embeddings.strict is True
    assert runtime.image is None


def test_build_bedrock_runtime_builds_invoker_from_settings(monkeypatch, fake_invoker_cls):
    from bedrockio.llm.bedrock_invoker import Boto3BedrockInvoker

    seen = []
    invoker = fake_invoker_cls()

    def _from_settings(settings):
        seen.append(settings)
        return invoker

    monkeypatch.setattr(Boto3BedrockInvoker, "from_settings", staticmethod(_from_settings))
    settings = {"region": "eu-west-1", "text_model": "amazon.titan-text-express-v1"}
    runtime = build_bedrock_runtime(settings)
    assert seen == [settings]
    assert runtime.text.invoker is invoker
