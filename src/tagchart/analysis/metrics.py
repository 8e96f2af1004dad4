"""Metric definitions and the count/sum/average aggregator."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from tagchart.analysis.filters import (
    DEFAULT_MAX_FILTER_DEPTH,
    FilterExpression,
    evaluate_filter,
)
from tagchart.domain._validation import (
    as_bool,
    as_optional_str,
    as_str,
    expect_object,
    fail,
    parse_json_object,
)
from tagchart.domain.records import Record, RecordSet, iter_records
from tagchart.errors import InvalidMetricDefinitionError


class CalculationType(StrEnum):
    COUNT = "count"
    SUM = "sum"
    AVERAGE = "average"


@dataclass(frozen=True, slots=True)
class Metric:
    id: str
    name: str
    calculation_type: CalculationType = CalculationType.COUNT
    source_tag: str | None = None
    filter_expression: FilterExpression | None = None
    is_default: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.calculation_type, CalculationType):
            try:
                object.__setattr__(self, "calculation_type", CalculationType(self.calculation_type))
            except ValueError as exc:
                raise InvalidMetricDefinitionError(
                    f"Metric.calculation_type: invalid value {self.calculation_type!r}"
                ) from exc

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "id": self.id,
            "name": self.name,
            "calculationType": self.calculation_type.value,
        }
        if self.source_tag is not None:
            out["sourceTag"] = self.source_tag
        if self.filter_expression is not None:
            out["filterExpression"] = self.filter_expression.to_dict()
        if self.is_default is not None:
            out["isDefault"] = self.is_default
        return out

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, object],
        *,
        max_filter_depth: int = DEFAULT_MAX_FILTER_DEPTH,
    ) -> Metric:
        err = InvalidMetricDefinitionError
        parsed = expect_object(
            data,
            "metric",
            required={"id", "name", "calculationType"},
            optional={"sourceTag", "filterExpression", "isDefault"},
            error=err,
        )
        raw_type = as_str(parsed["calculationType"], "metric.calculationType", error=err)
        try:
            calculation_type = CalculationType(raw_type.lower())
        except ValueError:
            fail("metric.calculationType", f"invalid value {raw_type!r}; expected count, sum or average", err)

        filter_expression = None
        raw_filter = parsed.get("filterExpression")
        if raw_filter is not None:
            if not isinstance(raw_filter, Mapping):
                fail("metric.filterExpression", "expected object", err)
            filter_expression = FilterExpression.from_dict(
                raw_filter, "metric.filterExpression", max_depth=max_filter_depth
            )

        is_default = parsed.get("isDefault")
        return cls(
            id=as_str(parsed["id"], "metric.id", min_len=1, error=err),
            name=as_str(parsed["name"], "metric.name", min_len=1, error=err),
            calculation_type=calculation_type,
            source_tag=as_optional_str(parsed.get("sourceTag"), "metric.sourceTag", err),
            filter_expression=filter_expression,
            is_default=None if is_default is None else as_bool(is_default, "metric.isDefault", err),
        )

    @classmethod
    def from_json(cls, raw: str, *, max_filter_depth: int = DEFAULT_MAX_FILTER_DEPTH) -> Metric:
        payload = parse_json_object(raw, "metric", InvalidMetricDefinitionError)
        return cls.from_dict(payload, max_filter_depth=max_filter_depth)


def evaluate_metric(
    metric: Metric,
    records: RecordSet | Iterable[Record],
    *,
    max_filter_depth: int = DEFAULT_MAX_FILTER_DEPTH,
) -> float:
    """
    Aggregate ``metric`` over ``records``.

    ``average`` divides by the number of numeric values found at
    ``source_tag``, not by the number of filtered records. Sum and average
    return ``0.0`` when there is no source tag or no numeric value.
    """

    selected = iter_records(records)
    if metric.filter_expression is not None:
        selected = [
            record
            for record in selected
            if evaluate_filter(record, metric.filter_expression, max_depth=max_filter_depth)
        ]

    if metric.calculation_type is CalculationType.COUNT:
        return float(len(selected))

    if metric.source_tag is None:
        return 0.0

    values = [
        number
        for number in (record.number(metric.source_tag) for record in selected)
        if number is not None
    ]
    if not values:
        return 0.0
    total = sum(values)
    if metric.calculation_type is CalculationType.SUM:
        return total
    return total / len(values)


__all__ = ["CalculationType", "Metric", "evaluate_metric"]
