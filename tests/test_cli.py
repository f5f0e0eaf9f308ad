"""CLI tests for offline commands and error exit codes."""

from __future__ import annotations

import json

import pytest

from bedrockio.cli import entrypoints


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        entrypoints.build_parser().parse_args([])


def test_models_lists_registered_families(capsys):
    assert entrypoints.main(["models"]) == 0
    out = capsys.readouterr().out
    assert "amazon.titan-embed*" in out
    assert "stability.stable-diffusion*" in out


def test_encode_prints_request_body(capsys):
    code = entrypoints.main(
        ["encode", "--model", "amazon.titan-embed-text-v1", "--kind", "embedding", "--input", "hello"]
    )
    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"inputText": "hello"}


def test_encode_applies_settings_json(capsys):
    code = entrypoints.main(
        ["encode", "--model", "meta.llama3-8b-instruct-v1:0", "--input", "hi", "--settings", '{"max_gen_len": 32}']
    )
    assert code == 0
    assert json.loads(capsys.readouterr().out)["max_gen_len"] == 32


def test_encode_unsupported_model_exits_non_zero(capsys):
    assert entrypoints.main(["encode", "--model", "openai.gpt-4", "--input", "hi"]) == 2
    assert "Unsupported model" in capsys.readouterr().err


def test_encode_bad_settings_exits_non_zero(capsys):
    code = entrypoints.main(["encode", "--model", "meta.llama3-8b-instruct-v1:0", "--input", "hi", "--settings", "[1]"])
    assert code == 2


def test_embed_uses_configured_invoker(monkeypatch, capsys, fake_invoker_cls):
    invoker = fake_invoker_cls(responses=[{"embedding": [0.5]}, {"embedding": [1.5]}])
    monkeypatch.setattr(entrypoints, "_invoker", lambda config: invoker)
    monkeypatch.setenv("BEDROCK_EMBEDDING_MODEL", "amazon.titan-embed-text-v2:0")
    assert entrypoints.main(["embed", "a", "b"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line) for line in lines] == [[0.5], [1.5]]
