"""Typed error hierarchy for the analysis engine."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable error discriminant shared by every engine error."""

    CYCLE_DETECTED = "cycle_detected"
    UNKNOWN_CATEGORY = "unknown_category"
    INVALID_METRIC_DEFINITION = "invalid_metric_definition"
    INVALID_CHART_REQUEST = "invalid_chart_request"
    EXPRESSION_TOO_DEEP = "expression_too_deep"
    DEPENDENCY_CHAIN_TOO_DEEP = "dependency_chain_too_deep"


class AnalysisError(ValueError):
    """Base class for all engine failures."""

    kind: ErrorKind = ErrorKind.INVALID_CHART_REQUEST

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": str(self)}


class CycleDetectedError(AnalysisError):
    """Raised when the dependency relation contains at least one cycle."""

    kind = ErrorKind.CYCLE_DETECTED
    edges: tuple[str, ...]

    def __init__(self, edges: Iterable[str]) -> None:
        self.edges = tuple(edges)
        listed = ", ".join(self.edges) if self.edges else "<unknown>"
        super().__init__(
            f"Cyclic dependency detected; review the dependencies between: {listed}"
        )


class UnknownCategoryError(AnalysisError):
    """Raised when a pre-aggregated index has no entry for the category."""

    kind = ErrorKind.UNKNOWN_CATEGORY
    category: str

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Category {category!r} was not found in the category index.")


class InvalidMetricDefinitionError(AnalysisError):
    """Raised when a metric or filter expression payload is malformed."""

    kind = ErrorKind.INVALID_METRIC_DEFINITION


class InvalidChartRequestError(AnalysisError):
    """Raised when builder arguments cannot describe a chart."""

    kind = ErrorKind.INVALID_CHART_REQUEST


class ExpressionTooDeepError(AnalysisError):
    kind = ErrorKind.EXPRESSION_TOO_DEEP

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"Filter expression nesting exceeds max depth {max_depth}.")


class DependencyChainTooDeepError(AnalysisError):
    kind = ErrorKind.DEPENDENCY_CHAIN_TOO_DEEP

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"Dependency chain exceeds max depth {max_depth}.")


__all__ = [
    "AnalysisError",
    "CycleDetectedError",
    "DependencyChainTooDeepError",
    "ErrorKind",
    "ExpressionTooDeepError",
    "InvalidChartRequestError",
    "InvalidMetricDefinitionError",
    "UnknownCategoryError",
]
