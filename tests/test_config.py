"""Unit tests for TOML config loading and env overrides."""

from __future__ import annotations

from bedrockio.core.config import (
    DEFAULT_EMBEDDING_MODEL,
    build_effective_config,
    hash_config_dict,
    load_config,
    load_settings,
)


def test_load_config_reads_bedrockio_section(tmp_path):
    path = tmp_path / "bedrockio.toml"
    path.write_text('[bedrockio]\nregion = "eu-west-1"\nchat_model = "meta.llama3-8b-instruct-v1:0"\n', encoding="utf-8")
    assert load_config(path) == {"region": "eu-west-1", "chat_model": "meta.llama3-8b-instruct-v1:0"}


def test_load_config_missing_file_is_empty(tmp_path):
    assert load_config(tmp_path / "missing.toml") == {}
    assert load_config(None) == {}


def test_env_overrides_config_values():
    effective = build_effective_config(
        {"region": "eu-west-1", "strict_decoding": False},
        {"AWS_REGION": "us-west-2", "BEDROCK_STRICT_DECODING": "true", "BEDROCK_LOG_EVENTS": "0"},
    )
    assert effective["region"] == "us-west-2"
    assert effective["strict_decoding"] is True
    assert effective["log_events"] is False
    assert effective["embedding_model"] == DEFAULT_EMBEDDING_MODEL


def test_defaults_without_config_or_env():
    effective = build_effective_config({}, {})
    assert effective["region"] == "us-east-1"
    assert effective["endpoint_url"] is None
    assert effective["log_events"] is True


def test_load_settings_combines_file_and_env(tmp_path):
    path = tmp_path / "bedrockio.toml"
    path.write_text('text_model = "mistral.mistral-7b-instruct-v0:2"\n', encoding="utf-8")
    settings = load_settings(path, env={"BEDROCK_ENDPOINT_URL": "http://localhost:4566"})
    assert settings["text_model"] == "mistral.mistral-7b-instruct-v0:2"
    assert settings["endpoint_url"] == "http://localhost:4566"


def test_hash_config_dict_is_order_independent():
    assert hash_config_dict({"a": 1, "b": 2}) == hash_config_dict({"b": 2, "a": 1})
    assert hash_config_dict({"a": 1}) != hash_config_dict({"a": 2})
