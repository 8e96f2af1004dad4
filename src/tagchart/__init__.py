"""
tagchart - analysis engine for tagged task records.

File: src/tagchart/__init__.py

Purpose
- Package root. Exposes the engine entrypoints: filters, metrics, dependency
  checks and Mermaid chart builders over in-memory records.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from tagchart.analysis import (
    DateRangeFilter,
    FilterCondition,
    FilterExpression,
    Metric,
    detect_cycles,
    evaluate_filter,
    evaluate_metric,
)
from tagchart.charts import (
    ChartOutput,
    ScheduleFieldMapping,
    build_bar,
    build_line,
    build_pie,
    build_schedule,
)
from tagchart.config import EngineSettings
from tagchart.domain import Record, TypedValue
from tagchart.errors import AnalysisError

__version__ = "0.1.0"

__all__ = [
    "AnalysisError",
    "ChartOutput",
    "DateRangeFilter",
    "EngineSettings",
    "FilterCondition",
    "FilterExpression",
    "Metric",
    "Record",
    "ScheduleFieldMapping",
    "TypedValue",
    "__version__",
    "build_bar",
    "build_line",
    "build_pie",
    "build_schedule",
    "detect_cycles",
    "evaluate_filter",
    "evaluate_metric",
]
