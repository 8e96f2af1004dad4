"""
tagchart - runtime config loader.

File: src/tagchart/config/loader.py

Purpose
- Resolve the effective runtime config from layered sources.

Layering (lowest to highest)
- Built-in defaults from ``schema.DEFAULT_CONFIG``.
- ``tagchart.toml`` (or an explicit ``--config`` path), parsed with ``tomllib``.
- ``TAGCHART_<SECTION>_<FIELD>`` environment variables.
- Dotted CLI overrides such as ``{"schedule.title": "Sprint 9"}``.

The file layer is validated on its own first so that unknown keys are
reported against the file, not against a later override.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from tagchart.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "tagchart.toml"
ENV_PREFIX: Final[str] = "TAGCHART_"


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with precedence CLI > env > file > defaults."""

    if config_path is None:
        source = Path.cwd() / DEFAULT_CONFIG_FILE
    else:
        source = Path(config_path).expanduser()
    source = source.resolve()

    from_file = _read_toml(source, must_exist=config_path is not None)
    effective = assert_valid_config(merge_config(default_config(), from_file))

    layers = (
        _env_layer(os.environ if environ is None else environ),
        _cli_layer(cli_overrides or {}),
    )
    for layer in layers:
        effective = merge_config(effective, layer)
    effective = assert_valid_config(effective)

    return assert_valid_config(normalize_paths(effective, base_dir=source.parent))


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Rewrite every ``PATH_FIELDS`` entry as an absolute POSIX path under ``base_dir``."""

    result = merge_config({}, config)
    for section, key in PATH_FIELDS:
        block = result.get(section)
        if not isinstance(block, dict) or not isinstance(block.get(key), str):
            continue
        target = Path(os.path.expandvars(block[key])).expanduser()
        if not target.is_absolute():
            target = base_dir / target
        block[key] = Path(os.path.normpath(target)).as_posix()
    return result


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Compact, key-sorted JSON rendering of ``config``."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(path: Path, *, must_exist: bool) -> dict[str, Any]:
    if not path.is_file():
        if must_exist:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _to_int(text: str) -> int:
    return int(text)


def _to_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in ("1", "true", "t", "yes", "y", "on"):
        return True
    if lowered in ("0", "false", "f", "no", "n", "off"):
        return False
    raise ValueError(lowered)


def _to_str(text: str) -> str:
    return text


_COERCERS: Final[dict[type, tuple[Callable[[str], object], str]]] = {
    bool: (_to_bool, "a boolean (true/false/1/0/yes/no/on/off)"),
    int: (_to_int, "an integer"),
    str: (_to_str, "a string"),
}


def _leaves(
    tree: Mapping[str, object], trail: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], object]]:
    for key, value in tree.items():
        if isinstance(value, Mapping):
            yield from _leaves(value, (*trail, key))
        else:
            yield (*trail, key), value


# Env var name -> (config path, default's type); derived once from the defaults.
_ENV_BINDINGS: Final[dict[str, tuple[tuple[str, ...], type]]] = {
    ENV_PREFIX + "_".join(path).upper(): (path, type(default))
    for path, default in _leaves(DEFAULT_CONFIG)
    if type(default) in _COERCERS
}


def _env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for name in sorted(_ENV_BINDINGS.keys() & environ.keys()):
        path, kind = _ENV_BINDINGS[name]
        coerce, expected = _COERCERS[kind]
        try:
            value = coerce(environ[name].strip())
        except ValueError as exc:
            raise ConfigLoadError(f"{name} -> {'.'.join(path)} must be {expected}") from exc
        _assign(layer, path, value)
    return layer


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for dotted, value in sorted(overrides.items()):
        if value is None:
            continue
        path = tuple(filter(None, dotted.split(".")))
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        _assign(layer, path, value)
    return layer


def _assign(tree: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    *parents, leaf = path
    node = tree
    for part in parents:
        node = node.setdefault(part, {})
    node[leaf] = value


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "load_config",
    "normalize_paths",
]
