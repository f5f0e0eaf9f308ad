"""Unit tests for Amazon Titan request encoding and response decoding."""

from __future__ import annotations

import json

import pytest

from bedrockio.llm.errors import MalformedResponseError
from bedrockio.llm.providers.amazon_provider import AmazonTitanIO

TITAN_TEXT = "amazon.titan-text-express-v1"


def test_text_request_uses_documented_defaults():
    body = AmazonTitanIO().build_text_request(TITAN_TEXT, "Hello", {})
    assert body == {
        "inputText": "Hello",
        "textGenerationConfig": {"temperature": 0.7, "topP": 0.9, "maxTokenCount": 512, "stopSequences": []},
    }


def test_text_request_applies_overrides_and_ignores_wrong_types():
    body = AmazonTitanIO().build_text_request(
        TITAN_TEXT, "Hello", {"temperature": 0.1, "topP": "high", "maxTokenCount": 100, "stopSequences": ["|"]}
    )
    config = body["textGenerationConfig"]
    assert config["temperature"] == 0.1
    assert config["topP"] == 0.9
    assert config["maxTokenCount"] == 100
    assert config["stopSequences"] == ["|"]


def test_embedding_request_v1_sends_input_text_only():
    assert AmazonTitanIO().build_embedding_request("amazon.titan-embed-text-v1", "doc") == {"inputText": "doc"}


def test_embedding_request_v2_adds_dimensions_and_normalize():
    body = AmazonTitanIO().build_embedding_request("amazon.titan-embed-text-v2:0", "doc")
    assert body == {"inputText": "doc", "dimensions": 512, "normalize": True}


def test_parse_text_response_keeps_first_result_and_counts_discarded():
    body = json.dumps(
        {
            "inputTextTokenCount": 3,
            "results": [{"outputText": "first", "completionReason": "FINISH"}, {"outputText": "second"}],
        }
    ).encode("utf-8")
    results = AmazonTitanIO().parse_text_response(TITAN_TEXT, body)
    assert len(results) == 1
    assert results[0].text == "first"
    assert results[0].finish_reason == "FINISH"
    assert results[0].metadata == {"discarded_candidates": 1, "input_tokens": 3}


def test_parse_text_response_without_results_is_empty():
    assert AmazonTitanIO().parse_text_response(TITAN_TEXT, b'{"results": []}') == []
    assert AmazonTitanIO().parse_text_response(TITAN_TEXT, b"{}") == []


def test_parse_embedding_response_returns_vector_or_empty():
    io = AmazonTitanIO()
    assert io.parse_embedding_response(b'{"embedding": [0.1, 2, -0.5]}') == (0.1, 2.0, -0.5)
    assert io.parse_embedding_response(b'{"embedding": []}') == ()
    assert io.parse_embedding_response(b"{}") == ()


def test_malformed_body_is_tolerated_unless_strict():
    io = AmazonTitanIO()
    assert io.parse_embedding_response(b"not json") == ()
    with pytest.raises(MalformedResponseError):
        io.parse_embedding_response(b"not json", strict=True)


def test_extract_stream_text_reads_output_text():
    io = AmazonTitanIO()
    assert io.extract_stream_text({"outputText": "Hi", "index": 0}) == "Hi"
    assert io.extract_stream_text({"completionReason": "FINISH"}) is None


def test_converse_request_uses_titan_inference_values():
    request = AmazonTitanIO().build_converse_request(
        TITAN_TEXT, [{"role": "system", "content": "Be terse."}, {"role": "user", "content": "Hi"}], None
    )
    assert request["modelId"] == TITAN_TEXT
    assert request["inferenceConfig"] == {"temperature": 0.7, "topP": 0.9, "maxTokens": 512, "stopSequences": []}
    assert request["system"] == [{"text": "Be terse."}]
    assert request["messages"] == [{"role": "user", "content": [{"text": "Hi"}]}]
    assert "toolConfig" not in request
