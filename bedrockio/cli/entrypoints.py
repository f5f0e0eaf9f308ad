"""Primary CLI entrypoints for inspecting routes, encoding requests and calling Bedrock models."""

from __future__ import annotations

import argparse
import base64
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from bedrockio.core.config import load_settings
from bedrockio.llm.errors import BedrockProviderError, InvalidParameterError
from bedrockio.llm.router import default_registry
from bedrockio.llm.runtime import (
    ChatCompletionClient,
    EmbeddingClient,
    TextGenerationClient,
    TextToImageClient,
)
from bedrockio.llm.types import Capability, ChatHistory


def _parse_settings(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode the ``--settings`` JSON object."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise InvalidParameterError(f"--settings must be a JSON object: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidParameterError("--settings must be a JSON object")
    return data


def _history(args: argparse.Namespace) -> ChatHistory:
    history = ChatHistory()
    if args.system:
        history.add_system_message(args.system)
    for message in args.message:
        history.add_user_message(message)
    return history


def _config(args: argparse.Namespace) -> Dict[str, Any]:
    return load_settings(Path(args.config) if args.config else None)


def _invoker(config: Dict[str, Any]):
    from bedrockio.llm.bedrock_invoker import Boto3BedrockInvoker

    return Boto3BedrockInvoker.from_settings(config)


def _model(args: argparse.Namespace, config: Dict[str, Any], key: str) -> str:
    model_id = args.model or config.get(key)
    if not model_id:
        raise InvalidParameterError(f"No model configured. Pass --model or set {key}.")
    return str(model_id)


def cmd_models(args: argparse.Namespace) -> int:
    """List registered provider/family routes and their capabilities.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        int: Process return code.
    """
    for route in default_registry().routes():
        caps = ",".join(sorted(cap.value for cap in route.capabilities))
        print(f"{route.provider}.{route.family_prefix}*\t{type(route.io).__name__}\t{caps}")
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    """Print the request body a model would receive, without calling Bedrock."""
    route = default_registry().lookup(args.model)
    settings = _parse_settings(args.settings)
    if args.kind == "text":
        payload = route.require(Capability.TEXT_GENERATION).io.build_text_request(args.model, args.input, settings)
    elif args.kind == "chat":
        history = ChatHistory().add_user_message(args.input)
        payload = route.require(Capability.CHAT).io.build_converse_request(args.model, history, settings)
    elif args.kind == "embedding":
        payload = route.require(Capability.EMBEDDING).io.build_embedding_request(args.model, args.input)
    else:
        payload = route.require(Capability.TEXT_TO_IMAGE).io.build_image_request(
            args.model, args.input, args.width, args.height, settings
        )
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate text from one prompt."""
    config = _config(args)
    client = TextGenerationClient(
        model_id=_model(args, config, "text_model"),
        invoker=_invoker(config),
        strict=bool(config.get("strict_decoding")),
        log_events=bool(config.get("log_events", True)),
    )
    settings = _parse_settings(args.settings)
    if args.stream:
        for fragment in client.stream(args.prompt, settings):
            sys.stdout.write(fragment.text)
            sys.stdout.flush()
        print()
        return 0
    for item in client.generate(args.prompt, settings):
        print(item.text)
    return 0


def cmd_chat(args: argparse.Namespace) -> int:
    """Send a short chat history through the Converse API."""
    config = _config(args)
    client = ChatCompletionClient(
        model_id=_model(args, config, "chat_model"),
        invoker=_invoker(config),
        log_events=bool(config.get("log_events", True)),
    )
    settings = _parse_settings(args.settings)
    history = _history(args)
    if args.stream:
        for fragment in client.stream(history, settings):
            sys.stdout.write(fragment.content)
            sys.stdout.flush()
        print()
        return 0
    for item in client.complete(history, settings):
        print(item.content)
    return 0


def cmd_embed(args: argparse.Namespace) -> int:
    """Print one JSON embedding vector per input text."""
    config = _config(args)
    client = EmbeddingClient(
        model_id=_model(args, config, "embedding_model"),
        invoker=_invoker(config),
        strict=bool(config.get("strict_decoding")),
        log_events=bool(config.get("log_events", True)),
    )
    for vector in client.embed(args.texts):
        print(json.dumps(list(vector)))
    return 0


def cmd_image(args: argparse.Namespace) -> int:
    """Generate one image; writes PNG bytes to --output when given."""
    config = _config(args)
    client = TextToImageClient(
        model_id=_model(args, config, "image_model"),
        invoker=_invoker(config),
        strict=bool(config.get("strict_decoding")),
        log_events=bool(config.get("log_events", True)),
    )
    result = client.generate_image(args.description, args.width, args.height, _parse_settings(args.settings))
    if not result.ok:
        print(result.message, file=sys.stderr)
        return 1
    if args.output:
        Path(args.output).write_bytes(base64.b64decode(result.base64 or ""))
        print(f"Wrote {args.output}")
    else:
        print(result.message)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser.
    """
    p = argparse.ArgumentParser(prog="bedrockio")
    p.add_argument("--config", type=str, default=None, help="Path to a TOML config file.")
    sub = p.add_subparsers(dest="cmd", required=True)

    models = sub.add_parser("models", help="List supported model families")
    models.set_defaults(func=cmd_models)

    enc = sub.add_parser("encode", help="Print the request body for a model without calling it")
    enc.add_argument("--model", type=str, required=True)
    enc.add_argument("--kind", choices=["text", "chat", "embedding", "image"], default="text")
    enc.add_argument("--input", type=str, required=True)
    enc.add_argument("--width", type=int, default=512)
    enc.add_argument("--height", type=int, default=512)
    enc.add_argument("--settings", type=str, default=None, help="Execution settings as a JSON object.")
    enc.set_defaults(func=cmd_encode)

    gen = sub.add_parser("generate", help="Generate text from a prompt")
    gen.add_argument("--model", type=str, default=None)
    gen.add_argument("--prompt", type=str, required=True)
    gen.add_argument("--settings", type=str, default=None)
    gen.add_argument("--stream", action="store_true")
    gen.set_defaults(func=cmd_generate)

    chat = sub.add_parser("chat", help="Chat completion via the Converse API")
    chat.add_argument("--model", type=str, default=None)
    chat.add_argument("--system", type=str, default=None)
    chat.add_argument("--message", type=str, action="append", required=True)
    chat.add_argument("--settings", type=str, default=None)
    chat.add_argument("--stream", action="store_true")
    chat.set_defaults(func=cmd_chat)

    emb = sub.add_parser("embed", help="Embed one or more texts")
    emb.add_argument("--model", type=str, default=None)
    emb.add_argument("texts", nargs="+")
    emb.set_defaults(func=cmd_embed)

    img = sub.add_parser("image", help="Generate an image from a description")
    img.add_argument("--model", type=str, default=None)
    img.add_argument("--description", type=str, required=True)
    img.add_argument("--width", type=int, default=1024)
    img.add_argument("--height", type=int, default=1024)
    img.add_argument("--settings", type=str, default=None)
    img.add_argument("--output", type=str, default=None)
    img.set_defaults(func=cmd_image)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for bedrockio.

    Returns:
        int: Process return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except BedrockProviderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
