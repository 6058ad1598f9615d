"""Reading values out of YAML configuration trees."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

import yaml

T = TypeVar("T")

_TRUE = {"y", "yes", "true", "on"}
_FALSE = {"n", "no", "false", "off"}


class ConfigError(Exception):
    """A configuration value is missing or has the wrong form."""


def _lookup(node: Any, key: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def _convert(value: Any, type_: type[T], key: str) -> T:
    if type_ is bool:
        if isinstance(value, bool):
            return value  # type: ignore[return-value]
        if isinstance(value, str) and value.lower() in _TRUE:
            return True  # type: ignore[return-value]
        if isinstance(value, str) and value.lower() in _FALSE:
            return False  # type: ignore[return-value]
        raise ConfigError(f"{key}: cannot read {value!r} as bool")
    if isinstance(value, (Mapping, list)):
        raise ConfigError(f"{key}: expected a scalar, got {type(value).__name__}")
    if type_ is int and isinstance(value, bool):
        raise ConfigError(f"{key}: cannot read {value!r} as int")
    if type_ is str and isinstance(value, bool):
        return ("true" if value else "false")  # type: ignore[return-value]
    if isinstance(value, type_):
        return value
    try:
        return type_(value)  # type: ignore[call-arg]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key}: cannot read {value!r} as {type_.__name__}") from exc


def yaml_read_required(node: Any, key: str, type_: type[T]) -> T:
    """Read a value that must be present; raise ConfigError otherwise."""
    value = _lookup(node, key)
    if value is None:
        raise ConfigError(f"Not set {key} value")
    return _convert(value, type_, key)


def yaml_read(node: Any, key: str, default: T) -> T:
    """Read a value, falling back to ``default`` when absent or null.

    The value is converted to the type of ``default`` unless it is None.
    """
    value = _lookup(node, key)
    if value is None:
        return default
    if default is None:
        return value
    return _convert(value, type(default), key)


def yaml_sub_node(node: Any, name: str) -> Any:
    """Return a sub-node that must exist; raise ConfigError otherwise."""
    if not isinstance(node, Mapping) or name not in node:
        raise ConfigError(f"Cannot find subnode {name}")
    return node[name]


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a YAML file whose top level is a mapping."""
    with open(path, encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data