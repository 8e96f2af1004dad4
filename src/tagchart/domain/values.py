"""
Typed metadata values attached to record tags.

A record's metadata maps each tag key to a ``TypedValue``: one of string,
integer, float, bool or string array. Values arriving from YAML/JSON are
classified with a fixed precedence cascade

    integer -> float -> boolean -> sequence -> string

so ambiguous inputs such as ``3`` or ``true`` always land in the same
variant. ``infer_typed_value`` classifies already-decoded scalars and
``parse_scalar_text`` classifies raw text literals.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Final

_INT_LITERAL: Final[re.Pattern[str]] = re.compile(r"^[-+]?\d+$")
_FLOAT_LITERAL: Final[re.Pattern[str]] = re.compile(
    r"^[-+]?(?:\d+\.\d*|\.\d+|\d+(?=[eE]))(?:[eE][-+]?\d+)?$"
)
_SEQUENCE_LITERAL: Final[re.Pattern[str]] = re.compile(r"^\[(.*)\]$", re.DOTALL)
_BOOL_LITERALS: Final[dict[str, bool]] = {"true": True, "false": False}

ScalarPayload = str | int | float | bool | tuple[str, ...]


class ValueKind(StrEnum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    STRING_ARRAY = "string_array"


@dataclass(frozen=True, slots=True)
class TypedValue:
    """Closed tagged value; construct through the classmethods."""

    kind: ValueKind
    value: ScalarPayload

    @classmethod
    def string(cls, value: str) -> TypedValue:
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def integer(cls, value: int) -> TypedValue:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"integer value expected, got {type(value).__name__}")
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def float_(cls, value: float) -> TypedValue:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"float value expected, got {type(value).__name__}")
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def boolean(cls, value: bool) -> TypedValue:
        if not isinstance(value, bool):
            raise TypeError(f"bool value expected, got {type(value).__name__}")
        return cls(ValueKind.BOOL, value)

    @classmethod
    def string_array(cls, values: tuple[str, ...] | list[str]) -> TypedValue:
        return cls(ValueKind.STRING_ARRAY, tuple(str(item) for item in values))

    @property
    def is_numeric(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.FLOAT)

    def as_number(self) -> float | None:
        """Numeric view for Integer/Float values, ``None`` for everything else."""
        if self.kind is ValueKind.INTEGER or self.kind is ValueKind.FLOAT:
            return float(self.value)  # type: ignore[arg-type]
        return None

    def as_string(self) -> str | None:
        if self.kind is ValueKind.STRING:
            return self.value  # type: ignore[return-value]
        return None

    def as_string_array(self) -> tuple[str, ...] | None:
        if self.kind is ValueKind.STRING_ARRAY:
            return self.value  # type: ignore[return-value]
        return None

    def to_string_value(self) -> str:
        """Canonical string form used for equality tests and index keys."""
        if self.kind is ValueKind.STRING:
            return self.value  # type: ignore[return-value]
        if self.kind is ValueKind.BOOL:
            return "true" if self.value else "false"
        if self.kind is ValueKind.STRING_ARRAY:
            return "[" + ", ".join(self.value) + "]"  # type: ignore[arg-type]
        return format_number(self.value)  # type: ignore[arg-type]

    def to_plain(self) -> str | int | float | bool | list[str]:
        """YAML/JSON-ready scalar for writing metadata back out."""
        if self.kind is ValueKind.STRING_ARRAY:
            return list(self.value)  # type: ignore[arg-type]
        return self.value  # type: ignore[return-value]


def format_number(value: int | float) -> str:
    """Render numbers the way tag values print: whole floats drop ``.0``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def infer_typed_value(raw: object) -> TypedValue:
    """Classify an already-decoded YAML/JSON value."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return TypedValue.integer(raw)
    if isinstance(raw, float):
        return TypedValue.float_(raw)
    if isinstance(raw, bool):
        return TypedValue.boolean(raw)
    if isinstance(raw, (list, tuple)):
        return TypedValue.string_array(tuple(_sequence_item_text(item) for item in raw))
    if raw is None:
        return TypedValue.string("")
    if isinstance(raw, (date, datetime)):
        return TypedValue.string(raw.isoformat())
    return TypedValue.string(str(raw))


def parse_scalar_text(text: str) -> TypedValue:
    """Classify a raw textual literal with the same precedence cascade."""
    stripped = text.strip()
    if _INT_LITERAL.match(stripped):
        return TypedValue.integer(int(stripped))
    if _FLOAT_LITERAL.match(stripped):
        return TypedValue.float_(float(stripped))
    lowered = stripped.lower()
    if lowered in _BOOL_LITERALS:
        return TypedValue.boolean(_BOOL_LITERALS[lowered])
    sequence = _SEQUENCE_LITERAL.match(stripped)
    if sequence is not None:
        inner = sequence.group(1).strip()
        if not inner:
            return TypedValue.string_array(())
        return TypedValue.string_array(
            tuple(_unquote(part.strip()) for part in inner.split(","))
        )
    return TypedValue.string(text)


def _sequence_item_text(item: object) -> str:
    if isinstance(item, str):
        return item
    if item is None:
        return ""
    if isinstance(item, (date, datetime)):
        return item.isoformat()
    if isinstance(item, (bool, int, float)):
        return format_number(item)
    return str(item)


def _unquote(part: str) -> str:
    if len(part) >= 2 and part[0] == part[-1] and part[0] in ("'", '"'):
        return part[1:-1]
    return part


__all__ = [
    "TypedValue",
    "ValueKind",
    "format_number",
    "infer_typed_value",
    "parse_scalar_text",
]
