"""
Boolean filter expressions over record metadata.

An expression is a tree whose leaves are ``FilterCondition`` comparisons and
whose inner nodes combine child results with AND, OR or NOT.

Evaluation contract
- A missing tag fails every comparison, ``!=`` included.
- ``==``/``!=`` compare canonical string forms.
- Ordering operators need a numeric tag value and a numeric literal.
- ``contains``/``starts_with``/``ends_with`` need a string tag value.
- ``regex`` is evaluated as ``contains``.
- NOT negates the result of its *first* child only; further children are
  evaluated but ignored, and an empty NOT is true. Callers building NOT nodes
  should give them exactly one child.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from tagchart.config.schema import MAX_FILTER_DEPTH_CEILING
from tagchart.domain._validation import (
    as_sequence,
    as_str,
    expect_object,
    fail,
)
from tagchart.domain.records import Record
from tagchart.domain.values import TypedValue, ValueKind, format_number
from tagchart.errors import ExpressionTooDeepError, InvalidMetricDefinitionError

DEFAULT_MAX_FILTER_DEPTH: Final[int] = 64

LiteralValue = str | int | float | bool


class ComparisonOperator(StrEnum):
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"


class LogicalOperator(StrEnum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


@dataclass(frozen=True, slots=True)
class FilterCondition:
    tag_key: str
    operator: ComparisonOperator
    value: LiteralValue

    def to_dict(self) -> dict[str, object]:
        return {"tagKey": self.tag_key, "operator": self.operator.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "condition") -> FilterCondition:
        err = InvalidMetricDefinitionError
        parsed = expect_object(data, path, required={"tagKey", "operator", "value"}, error=err)
        raw_operator = as_str(parsed["operator"], f"{path}.operator", error=err)
        try:
            operator = ComparisonOperator(raw_operator)
        except ValueError:
            allowed = ", ".join(item.value for item in ComparisonOperator)
            fail(f"{path}.operator", f"invalid value {raw_operator!r}; expected one of: {allowed}", err)
        value = parsed["value"]
        if not isinstance(value, (str, int, float, bool)):
            fail(f"{path}.value", f"expected scalar literal, got {type(value).__name__}", err)
        return cls(
            tag_key=as_str(parsed["tagKey"], f"{path}.tagKey", min_len=1, error=err),
            operator=operator,
            value=value,
        )


@dataclass(frozen=True, slots=True)
class FilterExpression:
    """Either a leaf ``condition`` or a composite of ``children``."""

    condition: FilterCondition | None = None
    children: tuple[FilterExpression, ...] | None = None
    operator: LogicalOperator = LogicalOperator.AND

    def __post_init__(self) -> None:
        if (self.condition is None) == (self.children is None):
            raise InvalidMetricDefinitionError(
                "FilterExpression: exactly one of 'condition' or 'children' must be set"
            )
        if self.children is not None and not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @classmethod
    def leaf(cls, tag_key: str, operator: ComparisonOperator | str, value: LiteralValue) -> FilterExpression:
        return cls(condition=FilterCondition(tag_key, ComparisonOperator(operator), value))

    @classmethod
    def all_of(cls, *children: FilterExpression) -> FilterExpression:
        return cls(children=children, operator=LogicalOperator.AND)

    @classmethod
    def any_of(cls, *children: FilterExpression) -> FilterExpression:
        return cls(children=children, operator=LogicalOperator.OR)

    @classmethod
    def negate(cls, child: FilterExpression) -> FilterExpression:
        return cls(children=(child,), operator=LogicalOperator.NOT)

    def to_dict(self) -> dict[str, object]:
        if self.condition is not None:
            return {"condition": self.condition.to_dict()}
        return {
            "expressions": [child.to_dict() for child in self.children or ()],
            "logicalOperator": self.operator.value,
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, object],
        path: str = "filterExpression",
        *,
        max_depth: int = DEFAULT_MAX_FILTER_DEPTH,
    ) -> FilterExpression:
        """Decode the wire form.

        Nesting beyond ``max_depth``, itself capped at ``MAX_FILTER_DEPTH_CEILING``,
        raises ``InvalidMetricDefinitionError``.
        """
        limit = min(max_depth, MAX_FILTER_DEPTH_CEILING)
        return _parse_expression(data, path, depth=1, max_depth=limit)


def _parse_expression(
    data: object, path: str, *, depth: int, max_depth: int
) -> FilterExpression:
    err = InvalidMetricDefinitionError
    if depth > max_depth:
        fail(path, f"nesting exceeds max depth {max_depth}", err)
    parsed = expect_object(
        data, path, required=set(), optional={"condition", "expressions", "logicalOperator"}, error=err
    )
    condition_raw = parsed.get("condition")
    expressions_raw = parsed.get("expressions")
    if (condition_raw is None) == (expressions_raw is None):
        fail(path, "exactly one of 'condition' or 'expressions' must be set", err)

    if condition_raw is not None:
        if not isinstance(condition_raw, Mapping):
            fail(f"{path}.condition", "expected object", err)
        return FilterExpression(condition=FilterCondition.from_dict(condition_raw, f"{path}.condition"))

    operator = LogicalOperator.AND
    operator_raw = parsed.get("logicalOperator")
    if operator_raw is not None:
        text = as_str(operator_raw, f"{path}.logicalOperator", error=err)
        try:
            operator = LogicalOperator(text.upper())
        except ValueError:
            fail(f"{path}.logicalOperator", f"invalid value {text!r}; expected AND, OR or NOT", err)

    children = tuple(
        _parse_expression(item, f"{path}.expressions[{index}]", depth=depth + 1, max_depth=max_depth)
        for index, item in enumerate(as_sequence(expressions_raw, f"{path}.expressions", err))
    )
    return FilterExpression(children=children, operator=operator)


def evaluate_filter(
    record: Record,
    expression: FilterExpression,
    *,
    max_depth: int = DEFAULT_MAX_FILTER_DEPTH,
) -> bool:
    """Evaluate ``expression`` against one record using an explicit work stack."""

    results: list[bool] = []
    pending: list[tuple[FilterExpression, int, bool]] = [(expression, 1, False)]

    while pending:
        node, depth, expanded = pending.pop()
        if depth > max_depth:
            raise ExpressionTooDeepError(max_depth)

        if node.condition is not None:
            results.append(evaluate_condition(record, node.condition))
            continue

        children = node.children or ()
        if not expanded:
            pending.append((node, depth, True))
            for child in reversed(children):
                pending.append((child, depth + 1, False))
            continue

        split = len(results) - len(children)
        child_results = results[split:]
        del results[split:]
        results.append(_combine(node.operator, child_results))

    return results[-1]


def _combine(operator: LogicalOperator, child_results: list[bool]) -> bool:
    if operator is LogicalOperator.OR:
        return any(child_results)
    if operator is LogicalOperator.NOT:
        return not (child_results[0] if child_results else False)
    return all(child_results)


def evaluate_condition(record: Record, condition: FilterCondition) -> bool:
    value = record.get(condition.tag_key)
    if value is None:
        return False
    compare = _COMPARATORS[condition.operator]
    return compare(value, condition.value)


def _literal_text(literal: LiteralValue) -> str | None:
    if isinstance(literal, bool):
        return "true" if literal else "false"
    if isinstance(literal, (int, float)):
        return format_number(literal)
    if isinstance(literal, str):
        return literal
    return None


def _equality(predicate: Callable[[str, str], bool]) -> Callable[[TypedValue, LiteralValue], bool]:
    def compare(value: TypedValue, literal: LiteralValue) -> bool:
        literal_text = _literal_text(literal)
        if literal_text is None:
            return False
        return predicate(value.to_string_value(), literal_text)

    return compare


def _ordering(predicate: Callable[[float, float], bool]) -> Callable[[TypedValue, LiteralValue], bool]:
    def compare(value: TypedValue, literal: LiteralValue) -> bool:
        number = value.as_number()
        if number is None:
            return False
        if isinstance(literal, bool) or not isinstance(literal, (int, float)):
            return False
        return predicate(number, float(literal))

    return compare


def _text(predicate: Callable[[str, str], bool]) -> Callable[[TypedValue, LiteralValue], bool]:
    def compare(value: TypedValue, literal: LiteralValue) -> bool:
        if value.kind is not ValueKind.STRING or not isinstance(literal, str):
            return False
        return predicate(value.value, literal)  # type: ignore[arg-type]

    return compare


_COMPARATORS: Final[dict[ComparisonOperator, Callable[[TypedValue, LiteralValue], bool]]] = {
    ComparisonOperator.EQUAL: _equality(lambda a, b: a == b),
    ComparisonOperator.NOT_EQUAL: _equality(lambda a, b: a != b),
    ComparisonOperator.GREATER_THAN: _ordering(lambda a, b: a > b),
    ComparisonOperator.LESS_THAN: _ordering(lambda a, b: a < b),
    ComparisonOperator.GREATER_OR_EQUAL: _ordering(lambda a, b: a >= b),
    ComparisonOperator.LESS_OR_EQUAL: _ordering(lambda a, b: a <= b),
    ComparisonOperator.CONTAINS: _text(lambda a, b: b in a),
    ComparisonOperator.STARTS_WITH: _text(lambda a, b: a.startswith(b)),
    ComparisonOperator.ENDS_WITH: _text(lambda a, b: a.endswith(b)),
    # regex is evaluated as a substring match
    ComparisonOperator.REGEX: _text(lambda a, b: b in a),
}


__all__ = [
    "DEFAULT_MAX_FILTER_DEPTH",
    "ComparisonOperator",
    "FilterCondition",
    "FilterExpression",
    "LogicalOperator",
    "evaluate_condition",
    "evaluate_filter",
]
