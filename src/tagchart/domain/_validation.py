"""Strict wire-payload validators shared by the domain and chart models."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import NoReturn

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


def fail(path: str, message: str, error: type[ValueError] = ValueError) -> NoReturn:
    raise error(f"{path}: {message}")


def canonical_json(value: JSONValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def parse_json_object(
    raw: str, path: str, error: type[ValueError] = ValueError
) -> dict[str, object]:
    if not isinstance(raw, str):
        fail(path, f"expected JSON string, got {type(raw).__name__}", error)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        fail(path, f"invalid JSON: {exc}", error)
    if not isinstance(parsed, dict):
        fail(path, "JSON root must be an object", error)
    return parsed


def expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
    error: type[ValueError] = ValueError,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        fail(path, f"expected object, got {type(value).__name__}", error)

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            fail(path, f"object keys must be strings, got {type(key).__name__}", error)
        parsed[key] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        fail(path, f"unexpected fields: {unknown}", error)

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        fail(path, f"missing required fields: {missing}", error)

    return parsed


def as_str(
    value: object,
    path: str,
    *,
    min_len: int = 0,
    error: type[ValueError] = ValueError,
) -> str:
    if not isinstance(value, str):
        fail(path, f"expected string, got {type(value).__name__}", error)
    if len(value.strip()) < min_len:
        fail(path, f"must be at least {min_len} non-blank character(s)", error)
    return value


def as_optional_str(
    value: object, path: str, error: type[ValueError] = ValueError
) -> str | None:
    if value is None:
        return None
    return as_str(value, path, error=error)


def as_bool(value: object, path: str, error: type[ValueError] = ValueError) -> bool:
    if isinstance(value, bool):
        return value
    fail(path, f"expected boolean, got {type(value).__name__}", error)


def as_int(
    value: object,
    path: str,
    *,
    minimum: int | None = None,
    error: type[ValueError] = ValueError,
) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        fail(path, f"expected integer, got {type(value).__name__}", error)
    if minimum is not None and value < minimum:
        fail(path, f"must be >= {minimum}", error)
    return value


def as_float(value: object, path: str, error: type[ValueError] = ValueError) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        fail(path, f"expected number, got {type(value).__name__}", error)
    parsed = float(value)
    if not math.isfinite(parsed):
        fail(path, "must be finite", error)
    return parsed


def as_sequence(
    value: object, path: str, error: type[ValueError] = ValueError
) -> list[object]:
    if isinstance(value, (list, tuple)):
        return list(value)
    fail(path, f"expected array, got {type(value).__name__}", error)


def as_str_tuple(
    value: object, path: str, error: type[ValueError] = ValueError
) -> tuple[str, ...]:
    return tuple(
        as_str(item, f"{path}[{index}]", error=error)
        for index, item in enumerate(as_sequence(value, path, error))
    )
