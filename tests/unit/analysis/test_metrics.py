"""
tagchart - unit tests for the metric aggregator

File: tests/unit/analysis/test_metrics.py

Purpose
- Count/sum/average semantics, including the numeric-only average divisor.
- Metric wire parsing (camelCase) and validation errors.
"""

from __future__ import annotations

import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tagchart.analysis.filters import ComparisonOperator, FilterExpression, evaluate_filter
from tagchart.analysis.metrics import CalculationType, Metric, evaluate_metric
from tagchart.domain.records import Record
from tagchart.errors import InvalidMetricDefinitionError


def _records() -> dict[str, Record]:
    tags = {
        "a": {"status": "open", "points": 3},
        "b": {"status": "open", "points": 4.5},
        "c": {"status": "open", "points": "n/a"},
        "d": {"status": "done", "points": 1},
        "e": {"status": "open"},
    }
    return {record_id: Record.from_tags(record_id, values) for record_id, values in tags.items()}


OPEN = FilterExpression.leaf("status", "==", "open")


def test_count_equals_filtered_length() -> None:
    records = _records()
    assert evaluate_metric(Metric("all", "All"), records) == 5.0
    assert evaluate_metric(Metric("open", "Open", filter_expression=OPEN), records) == 4.0


_TAG_VALUES = st.one_of(
    st.integers(min_value=-5, max_value=5),
    st.floats(min_value=-5, max_value=5, allow_nan=False),
    st.booleans(),
    st.sampled_from(["open", "done", "in-progress", "3", ""]),
)
_GENERATED_RECORDS = st.lists(
    st.dictionaries(st.sampled_from(["status", "points", "owner"]), _TAG_VALUES, max_size=3),
    max_size=12,
).map(
    lambda rows: [Record.from_tags(f"r{index}", tags) for index, tags in enumerate(rows)]
)
_LEAVES = st.builds(
    FilterExpression.leaf,
    st.sampled_from(["status", "points", "owner", "missing"]),
    st.sampled_from(list(ComparisonOperator)),
    _TAG_VALUES,
)


@settings(max_examples=100, deadline=None)
@given(_GENERATED_RECORDS, _LEAVES)
def test_count_matches_filter_for_generated_conditions(
    records: list[Record], leaf: FilterExpression
) -> None:
    metric = Metric("count", "Count", filter_expression=leaf)

    expected = sum(evaluate_filter(record, leaf) for record in records)

    assert evaluate_metric(metric, records) == float(expected)


def test_sum_skips_non_numeric_and_absent_tag_sums_to_zero() -> None:
    records = _records()
    total = Metric("sum", "Points", CalculationType.SUM, source_tag="points")
    assert evaluate_metric(total, records) == pytest.approx(8.5)

    absent = Metric("sum", "Nothing", CalculationType.SUM, source_tag="estimate")
    assert evaluate_metric(absent, records) == 0.0

    no_source = Metric("sum", "No source", CalculationType.SUM)
    assert evaluate_metric(no_source, records) == 0.0


def test_average_divides_by_numeric_value_count() -> None:
    records = _records()
    average = Metric(
        "avg", "Average points", CalculationType.AVERAGE, source_tag="points", filter_expression=OPEN
    )
    # four open records, two carry numeric points
    assert evaluate_metric(average, records) == pytest.approx((3 + 4.5) / 2)

    every = Metric("avg", "Average points", CalculationType.AVERAGE, source_tag="points")
    assert evaluate_metric(every, records) == pytest.approx(8.5 / 3)
    assert evaluate_metric(every, {}) == 0.0


def test_metric_wire_round_trip() -> None:
    payload = {
        "id": "open-points",
        "name": "Open points",
        "calculationType": "SUM",
        "sourceTag": "points",
        "filterExpression": {"condition": {"tagKey": "status", "operator": "==", "value": "open"}},
        "isDefault": True,
    }

    metric = Metric.from_json(json.dumps(payload))

    assert metric.calculation_type is CalculationType.SUM
    assert metric.is_default is True
    assert evaluate_metric(metric, _records()) == pytest.approx(7.5)
    assert Metric.from_dict(metric.to_dict()) == metric
    assert metric.to_dict()["calculationType"] == "sum"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("[]", "JSON root must be an object"),
        ("{", "invalid JSON"),
        ('{"id": "m", "name": "M"}', "missing required fields"),
        ('{"id": "m", "name": "M", "calculationType": "median"}', "calculationType"),
        ('{"id": "", "name": "M", "calculationType": "count"}', "metric.id"),
        ('{"id": "m", "name": "M", "calculationType": "count", "isDefault": "yes"}', "isDefault"),
        ('{"id": "m", "name": "M", "calculationType": "count", "filterExpression": []}', "filterExpression"),
    ],
)
def test_metric_from_json_rejects_malformed(raw: str, message: str) -> None:
    with pytest.raises(InvalidMetricDefinitionError, match=message):
        Metric.from_json(raw)


def test_metric_constructor_coerces_calculation_type() -> None:
    assert Metric("m", "M", "average").calculation_type is CalculationType.AVERAGE  # type: ignore[arg-type]
    with pytest.raises(InvalidMetricDefinitionError):
        Metric("m", "M", "median")  # type: ignore[arg-type]
