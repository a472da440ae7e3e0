"""Merge configuration sources into a validated ``CollectConfig``."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import CollectConfig

ENV_PREFIX = "COLLECT__"


def resolve_with_precedence(
    *,
    defaults: CollectConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> CollectConfig:
    """Layer overrides on top of ``defaults``: file, then environment, then CLI.

    Args:
        defaults: Baseline configuration.
        file_overrides: Nested mapping read from ``config.yaml``.
        env_overrides: Nested mapping derived from ``COLLECT__*`` variables.
        cli_overrides: Mapping whose keys may be dotted paths (``index.recent_days``).

    Returns:
        CollectConfig: Validated configuration.

    Raises:
        ConfigError: If a source is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    for label, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(source, label=label))

    try:
        return CollectConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``COLLECT__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``"7"`` becomes ``7`` and ``"true"``
    becomes ``True``; unparsable values are kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        assign_path(overrides, path, value)
    return overrides


def flatten_for_env(config: CollectConfig) -> Dict[str, str]:
    """Render ``config`` as ``COLLECT__SECTION__KEY`` environment assignments."""
    flat: Dict[str, str] = {}

    def _walk(prefix: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for child_key, child in value.items():
                _walk(prefix + [str(child_key)], child)
            return
        env_key = ENV_PREFIX + "__".join(part.upper() for part in prefix)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            flat[env_key] = "null" if value is None else str(value)

    for section, payload in config.model_dump(mode="python").items():
        _walk([section], payload)
    return flat


def assign_path(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``value`` at the nested ``path`` inside ``target``.

    Raises:
        ConfigError: If an intermediate segment already holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign {'.'.join(path)}: '{segment}' is not a mapping."
            )
        node = existing
    node[path[-1]] = value


def _expand_dotted(source: Mapping[str, Any], *, label: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand_dotted(value, label=label)
        path = key.split(".")
        if isinstance(value, dict):
            existing = result
            for segment in path:
                existing = existing.setdefault(segment, {})
                if not isinstance(existing, dict):
                    raise ConfigError(f"{label.capitalize()} override for {key} conflicts.")
            existing.update(_deep_merge(existing, value))
        else:
            assign_path(result, path, value)
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "assign_path",
    "flatten_for_env",
    "overrides_from_env",
    "resolve_with_precedence",
]
