"""Tolerant execution-settings resolution and typed per-provider settings.

Execution settings arrive as a loosely typed mapping. Values are looked up by
their wire name and silently replaced by the provider default when missing or
of the wrong kind; callers wanting strict validation must validate first.
"""

from __future__ import annotations

from dataclasses import MISSING, Field, field, fields
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

T = TypeVar("T")

Settings = Optional[Mapping[str, Any]]


def _is_float(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


KIND_CHECKS: Dict[str, Callable[[Any], bool]] = {
    "float": _is_float,
    "int": _is_int,
    "str": lambda value: isinstance(value, str),
    "bool": lambda value: isinstance(value, bool),
    "str_list": _is_str_list,
    "list": lambda value: isinstance(value, (list, tuple)),
    "dict": lambda value: isinstance(value, Mapping),
    "any": lambda value: value is not None,
}


def infer_kind(default: Any) -> str:
    """Guess the expected kind from a default value."""
    if isinstance(default, bool):
        return "bool"
    if isinstance(default, int):
        return "int"
    if isinstance(default, float):
        return "float"
    if isinstance(default, str):
        return "str"
    if isinstance(default, Mapping):
        return "dict"
    if isinstance(default, (list, tuple)):
        return "str_list" if _is_str_list(default) else "list"
    return "any"


def resolve_setting(settings: Settings, key: str, default: Any = None, kind: Optional[str] = None) -> Any:
    """Return ``settings[key]`` when present and of the expected kind, else ``default``."""
    if not settings or key not in settings:
        return default
    value = settings[key]
    check = KIND_CHECKS.get(kind or infer_kind(default), KIND_CHECKS["any"])
    if not check(value):
        return default
    if (kind or infer_kind(default)) == "float":
        return float(value)
    if isinstance(value, tuple):
        return list(value)
    return value


def setting(key: str, default: Any = None, kind: Optional[str] = None) -> Any:
    """Declare a dataclass field bound to one wire-level settings key."""
    metadata = {"key": key, "kind": kind or infer_kind(default)}
    if isinstance(default, (list, dict)):
        snapshot = default
        return field(default_factory=lambda: type(snapshot)(snapshot), metadata=metadata)
    return field(default=default, metadata=metadata)


def _field_default(item: Field) -> Any:
    if item.default is not MISSING:
        return item.default
    if item.default_factory is not MISSING:  # type: ignore[misc]
        return item.default_factory()  # type: ignore[misc]
    return None


def materialize(settings_cls: Type[T], settings: Settings) -> T:
    """Build a typed settings object from a raw mapping in one pass."""
    values: Dict[str, Any] = {}
    for item in fields(settings_cls):  # type: ignore[arg-type]
        key = item.metadata.get("key")
        if not key:
            continue
        values[item.name] = resolve_setting(settings, key, _field_default(item), item.metadata.get("kind"))
    return settings_cls(**values)


def drop_unset(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Remove ``None`` entries so unset optional fields never reach the wire."""
    return {key: value for key, value in payload.items() if value is not None}
