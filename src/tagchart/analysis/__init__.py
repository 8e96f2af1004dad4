"""Filter evaluation, metric aggregation, dependency checks and date ranges."""

from tagchart.analysis.date_range import DateRangeFilter, parse_iso_date, record_date
from tagchart.analysis.dependencies import dependency_graph, detect_cycles, has_cycles
from tagchart.analysis.filters import (
    ComparisonOperator,
    FilterCondition,
    FilterExpression,
    LogicalOperator,
    evaluate_condition,
    evaluate_filter,
)
from tagchart.analysis.metrics import CalculationType, Metric, evaluate_metric

__all__ = [
    "CalculationType",
    "ComparisonOperator",
    "DateRangeFilter",
    "FilterCondition",
    "FilterExpression",
    "LogicalOperator",
    "Metric",
    "dependency_graph",
    "detect_cycles",
    "evaluate_condition",
    "evaluate_filter",
    "evaluate_metric",
    "has_cycles",
    "parse_iso_date",
    "record_date",
]
