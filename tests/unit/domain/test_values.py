"""
tagchart - unit tests for typed tag values

File: tests/unit/domain/test_values.py

Purpose
- Pin the classification cascade (integer -> float -> boolean -> sequence -> string)
  and the canonical string forms used by equality filters and the category index.
"""

from __future__ import annotations

from datetime import date

import pytest

from tagchart.domain.values import (
    TypedValue,
    ValueKind,
    format_number,
    infer_typed_value,
    parse_scalar_text,
)


@pytest.mark.parametrize(
    ("raw", "kind", "value"),
    [
        (3, ValueKind.INTEGER, 3),
        (2.5, ValueKind.FLOAT, 2.5),
        (True, ValueKind.BOOL, True),
        (["a", 1, None], ValueKind.STRING_ARRAY, ("a", "1", "")),
        (date(2025, 2, 1), ValueKind.STRING, "2025-02-01"),
        (None, ValueKind.STRING, ""),
        ("open", ValueKind.STRING, "open"),
    ],
)
def test_infer_typed_value_follows_precedence(raw: object, kind: ValueKind, value: object) -> None:
    typed = infer_typed_value(raw)
    assert typed.kind is kind
    assert typed.value == value


def test_bool_is_never_classified_as_integer() -> None:
    assert infer_typed_value(False).kind is ValueKind.BOOL
    with pytest.raises(TypeError):
        TypedValue.integer(True)


@pytest.mark.parametrize(
    ("text", "kind", "value"),
    [
        ("42", ValueKind.INTEGER, 42),
        ("-1.5", ValueKind.FLOAT, -1.5),
        ("1e3", ValueKind.FLOAT, 1000.0),
        ("TRUE", ValueKind.BOOL, True),
        ("[a, 'b', \"c\"]", ValueKind.STRING_ARRAY, ("a", "b", "c")),
        ("[]", ValueKind.STRING_ARRAY, ()),
        ("2025-01-01", ValueKind.STRING, "2025-01-01"),
    ],
)
def test_parse_scalar_text_cascade(text: str, kind: ValueKind, value: object) -> None:
    typed = parse_scalar_text(text)
    assert typed.kind is kind
    assert typed.value == value


def test_canonical_string_forms() -> None:
    assert TypedValue.float_(3.0).to_string_value() == "3"
    assert TypedValue.float_(2.5).to_string_value() == "2.5"
    assert TypedValue.boolean(False).to_string_value() == "false"
    assert TypedValue.string_array(["x", "y"]).to_string_value() == "[x, y]"
    assert format_number(7) == "7"


def test_views_only_answer_for_matching_kind() -> None:
    number = TypedValue.integer(4)
    text = TypedValue.string("4")

    assert number.as_number() == 4.0
    assert text.as_number() is None
    assert text.as_string() == "4"
    assert number.as_string() is None
    assert TypedValue.string_array(["a"]).as_string_array() == ("a",)
    assert text.as_string_array() is None


def test_to_plain_round_trips_through_inference() -> None:
    for value in (
        TypedValue.string("open"),
        TypedValue.integer(5),
        TypedValue.float_(1.25),
        TypedValue.boolean(True),
        TypedValue.string_array(("a", "b")),
    ):
        assert infer_typed_value(value.to_plain()) == value
