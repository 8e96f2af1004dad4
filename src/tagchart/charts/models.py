"""
Structured chart documents and the ``ChartOutput`` pair.

Wire shape (shared with persisted exports)::

    {"renderedText": "...", "document": {"type": "gantt" | "pie" | "line" | "bar", ...}}

Document field names are camelCase (``dateFormat``, ``dependsOn``, ``xAxis``,
``yAxisLabel``, ``maxValue``) and must stay stable across releases.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from tagchart.domain._validation import (
    JSONValue,
    as_float,
    as_int,
    as_optional_str,
    as_sequence,
    as_str,
    as_str_tuple,
    canonical_json,
    expect_object,
    fail,
    parse_json_object,
)

DEFAULT_SCHEDULE_TITLE = "Task Schedule"
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"


class ChartKind(StrEnum):
    GANTT = "gantt"
    PIE = "pie"
    LINE = "line"
    BAR = "bar"


@dataclass(frozen=True, slots=True)
class GanttTask:
    id: str
    title: str
    start: str
    end: str
    status: str | None = None
    depends_on: str | None = None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start,
            "end": self.end,
            "status": self.status,
            "dependsOn": self.depends_on,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "GanttTask") -> GanttTask:
        parsed = expect_object(
            data,
            path,
            required={"id", "title", "start", "end"},
            optional={"status", "dependsOn"},
        )
        return cls(
            id=as_str(parsed["id"], f"{path}.id", min_len=1),
            title=as_str(parsed["title"], f"{path}.title"),
            start=as_str(parsed["start"], f"{path}.start"),
            end=as_str(parsed["end"], f"{path}.end"),
            status=as_optional_str(parsed.get("status"), f"{path}.status"),
            depends_on=as_optional_str(parsed.get("dependsOn"), f"{path}.dependsOn"),
        )


@dataclass(frozen=True, slots=True)
class GanttSection:
    name: str
    tasks: tuple[GanttTask, ...] = ()

    def to_dict(self) -> dict[str, JSONValue]:
        return {"name": self.name, "tasks": [task.to_dict() for task in self.tasks]}

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "GanttSection") -> GanttSection:
        parsed = expect_object(data, path, required={"name", "tasks"})
        return cls(
            name=as_str(parsed["name"], f"{path}.name"),
            tasks=tuple(
                GanttTask.from_dict(_as_mapping(item, f"{path}.tasks[{i}]"), f"{path}.tasks[{i}]")
                for i, item in enumerate(as_sequence(parsed["tasks"], f"{path}.tasks"))
            ),
        )


@dataclass(frozen=True, slots=True)
class GanttChart:
    title: str = DEFAULT_SCHEDULE_TITLE
    date_format: str = DEFAULT_DATE_FORMAT
    sections: tuple[GanttSection, ...] = ()

    kind = ChartKind.GANTT

    @property
    def tasks(self) -> tuple[GanttTask, ...]:
        return tuple(task for section in self.sections for task in section.tasks)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": self.kind.value,
            "title": self.title,
            "dateFormat": self.date_format,
            "sections": [section.to_dict() for section in self.sections],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "GanttChart") -> GanttChart:
        parsed = expect_object(data, path, required={"type", "title", "dateFormat", "sections"})
        _expect_kind(parsed, ChartKind.GANTT, path)
        return cls(
            title=as_str(parsed["title"], f"{path}.title"),
            date_format=as_str(parsed["dateFormat"], f"{path}.dateFormat"),
            sections=tuple(
                GanttSection.from_dict(
                    _as_mapping(item, f"{path}.sections[{i}]"), f"{path}.sections[{i}]"
                )
                for i, item in enumerate(as_sequence(parsed["sections"], f"{path}.sections"))
            ),
        )


@dataclass(frozen=True, slots=True)
class CategoryCount:
    label: str
    count: int

    def to_dict(self) -> dict[str, JSONValue]:
        return {"label": self.label, "count": self.count}

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "CategoryCount") -> CategoryCount:
        parsed = expect_object(data, path, required={"label", "count"})
        return cls(
            label=as_str(parsed["label"], f"{path}.label"),
            count=as_int(parsed["count"], f"{path}.count", minimum=0),
        )


@dataclass(frozen=True, slots=True)
class PieChart:
    title: str
    categories: tuple[CategoryCount, ...] = ()

    kind = ChartKind.PIE

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": self.kind.value,
            "title": self.title,
            "categories": [category.to_dict() for category in self.categories],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "PieChart") -> PieChart:
        parsed = expect_object(data, path, required={"type", "title", "categories"})
        _expect_kind(parsed, ChartKind.PIE, path)
        return cls(
            title=as_str(parsed["title"], f"{path}.title"),
            categories=tuple(
                CategoryCount.from_dict(
                    _as_mapping(item, f"{path}.categories[{i}]"), f"{path}.categories[{i}]"
                )
                for i, item in enumerate(as_sequence(parsed["categories"], f"{path}.categories"))
            ),
        )


@dataclass(frozen=True, slots=True)
class BarChart:
    title: str
    x_axis: tuple[str, ...] = ()
    y_axis_label: str = "Count"
    values: tuple[int, ...] = ()
    max_value: int = 0

    kind = ChartKind.BAR

    def __post_init__(self) -> None:
        if len(self.x_axis) != len(self.values):
            raise ValueError(
                f"BarChart: xAxis has {len(self.x_axis)} labels but {len(self.values)} values"
            )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": self.kind.value,
            "title": self.title,
            "xAxis": list(self.x_axis),
            "yAxisLabel": self.y_axis_label,
            "values": list(self.values),
            "maxValue": self.max_value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "BarChart") -> BarChart:
        parsed = expect_object(
            data, path, required={"type", "title", "xAxis", "yAxisLabel", "values", "maxValue"}
        )
        _expect_kind(parsed, ChartKind.BAR, path)
        return cls(
            title=as_str(parsed["title"], f"{path}.title"),
            x_axis=as_str_tuple(parsed["xAxis"], f"{path}.xAxis"),
            y_axis_label=as_str(parsed["yAxisLabel"], f"{path}.yAxisLabel"),
            values=tuple(
                as_int(item, f"{path}.values[{i}]", minimum=0)
                for i, item in enumerate(as_sequence(parsed["values"], f"{path}.values"))
            ),
            max_value=as_int(parsed["maxValue"], f"{path}.maxValue", minimum=0),
        )


@dataclass(frozen=True, slots=True)
class TimeSeriesPoint:
    date: str
    value: float

    def to_dict(self) -> dict[str, JSONValue]:
        return {"date": self.date, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "TimeSeriesPoint") -> TimeSeriesPoint:
        parsed = expect_object(data, path, required={"date", "value"})
        return cls(
            date=as_str(parsed["date"], f"{path}.date"),
            value=as_float(parsed["value"], f"{path}.value"),
        )


@dataclass(frozen=True, slots=True)
class LineChart:
    title: str
    y_axis_label: str = "Count"
    series: tuple[TimeSeriesPoint, ...] = ()

    kind = ChartKind.LINE

    @property
    def max_value(self) -> int:
        """Ceiling of the largest finite point value; 0 for an empty or non-finite series."""
        finite = (point.value for point in self.series if math.isfinite(point.value))
        peak = max(finite, default=0.0)
        return max(0, math.ceil(peak))

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": self.kind.value,
            "title": self.title,
            "yAxisLabel": self.y_axis_label,
            "series": [point.to_dict() for point in self.series],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "LineChart") -> LineChart:
        parsed = expect_object(data, path, required={"type", "title", "yAxisLabel", "series"})
        _expect_kind(parsed, ChartKind.LINE, path)
        return cls(
            title=as_str(parsed["title"], f"{path}.title"),
            y_axis_label=as_str(parsed["yAxisLabel"], f"{path}.yAxisLabel"),
            series=tuple(
                TimeSeriesPoint.from_dict(
                    _as_mapping(item, f"{path}.series[{i}]"), f"{path}.series[{i}]"
                )
                for i, item in enumerate(as_sequence(parsed["series"], f"{path}.series"))
            ),
        )


ChartDocument: TypeAlias = GanttChart | PieChart | BarChart | LineChart

_DOCUMENT_TYPES: dict[ChartKind, type[GanttChart] | type[PieChart] | type[BarChart] | type[LineChart]] = {
    ChartKind.GANTT: GanttChart,
    ChartKind.PIE: PieChart,
    ChartKind.BAR: BarChart,
    ChartKind.LINE: LineChart,
}


def document_from_dict(data: Mapping[str, object], path: str = "document") -> ChartDocument:
    """Decode a chart document by its ``type`` discriminant."""
    mapping = _as_mapping(data, path)
    raw_kind = as_str(mapping.get("type"), f"{path}.type")
    try:
        kind = ChartKind(raw_kind)
    except ValueError:
        allowed = ", ".join(item.value for item in ChartKind)
        fail(f"{path}.type", f"invalid value {raw_kind!r}; expected one of: {allowed}")
    return _DOCUMENT_TYPES[kind].from_dict(mapping, path)


@dataclass(frozen=True, slots=True)
class ChartOutput:
    """Rendered diagram text paired with the document it was rendered from."""

    rendered_text: str
    document: ChartDocument

    @property
    def kind(self) -> ChartKind:
        return self.document.kind

    def to_dict(self) -> dict[str, JSONValue]:
        return {"renderedText": self.rendered_text, "document": self.document.to_dict()}

    def to_json(self, *, indent: int | None = None) -> str:
        if indent is None:
            return canonical_json(self.to_dict())
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ChartOutput:
        parsed = expect_object(data, "ChartOutput", required={"renderedText", "document"})
        return cls(
            rendered_text=as_str(parsed["renderedText"], "ChartOutput.renderedText"),
            document=document_from_dict(
                _as_mapping(parsed["document"], "ChartOutput.document"), "ChartOutput.document"
            ),
        )

    @classmethod
    def from_json(cls, raw: str) -> ChartOutput:
        return cls.from_dict(parse_json_object(raw, "ChartOutput"))


def _as_mapping(value: object, path: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        fail(path, f"expected object, got {type(value).__name__}")
    return value


def _expect_kind(parsed: Mapping[str, object], kind: ChartKind, path: str) -> None:
    raw = as_str(parsed["type"], f"{path}.type")
    if raw != kind.value:
        fail(f"{path}.type", f"expected {kind.value!r}, got {raw!r}")


__all__ = [
    "DEFAULT_DATE_FORMAT",
    "DEFAULT_SCHEDULE_TITLE",
    "BarChart",
    "CategoryCount",
    "ChartDocument",
    "ChartKind",
    "ChartOutput",
    "GanttChart",
    "GanttSection",
    "GanttTask",
    "LineChart",
    "PieChart",
    "TimeSeriesPoint",
    "document_from_dict",
]
