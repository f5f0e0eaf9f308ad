"""Configuration loader and merger for bedrockio. Used by load_settings to build runtime config from TOML and environment variables."""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping

try:
    import tomllib
except ImportError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore


DEFAULT_CONFIG_PATH = Path("bedrockio.toml")
DEFAULT_REGION = "us-east-1"

DEFAULT_TEXT_MODEL = "amazon.titan-text-express-v1"
DEFAULT_CHAT_MODEL = "anthropic.claude-3-haiku-20240307-v1:0"
DEFAULT_EMBEDDING_MODEL = "amazon.titan-embed-text-v2:0"
DEFAULT_IMAGE_MODEL = "stability.stable-diffusion-xl-v1"


def load_config(path: Path | None) -> Dict[str, Any]:
    """Load a TOML config file and return the bedrockio section or top-level dict."""
    if not path or not path.exists():
        return {}
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "bedrockio" in data and isinstance(data["bedrockio"], dict):
        return data["bedrockio"]
    return data or {}


def hash_config_dict(config: Mapping[str, Any]) -> str:
    """Return a stable SHA-256 hash of a config mapping."""
    payload = json.dumps(config, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _env_or_config(env: Mapping[str, str], config: Mapping[str, Any], env_key: str, config_key: str, default: Any) -> Any:
    if env_key in env and env[env_key] != "":
        return env[env_key]
    if config_key in config:
        return config[config_key]
    return default


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off", ""}:
        return False
    return default


def _optional_text(value: Any) -> str | None:
    text = str(value or "").strip()
    return text or None


def build_effective_config(config: Mapping[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    """Build the effective config with env overrides applied."""
    return {
        "region": _optional_text(_env_or_config(env, config, "AWS_REGION", "region", DEFAULT_REGION)) or DEFAULT_REGION,
        "endpoint_url": _optional_text(_env_or_config(env, config, "BEDROCK_ENDPOINT_URL", "endpoint_url", None)),
        "profile_name": _optional_text(_env_or_config(env, config, "AWS_PROFILE", "profile_name", None)),
        "text_model": _env_or_config(env, config, "BEDROCK_TEXT_MODEL", "text_model", DEFAULT_TEXT_MODEL),
        "chat_model": _env_or_config(env, config, "BEDROCK_CHAT_MODEL", "chat_model", DEFAULT_CHAT_MODEL),
        "embedding_model": _env_or_config(
            env, config, "BEDROCK_EMBEDDING_MODEL", "embedding_model", DEFAULT_EMBEDDING_MODEL
        ),
        "image_model": _env_or_config(env, config, "BEDROCK_IMAGE_MODEL", "image_model", DEFAULT_IMAGE_MODEL),
        "strict_decoding": _coerce_bool(
            _env_or_config(env, config, "BEDROCK_STRICT_DECODING", "strict_decoding", False), False
        ),
        "log_events": _coerce_bool(_env_or_config(env, config, "BEDROCK_LOG_EVENTS", "log_events", True), True),
    }


def load_settings(path: Path | None = None, env: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Load TOML config (if any) and overlay environment variables."""
    config = load_config(path if path is not None else DEFAULT_CONFIG_PATH)
    return build_effective_config(config, os.environ if env is None else env)
