"""
tagchart - unit tests for chart document wire format

File: tests/unit/charts/test_models.py

Purpose
- Lock the persisted camelCase field names and the ``type`` discriminant.
- Strict decoding of ChartOutput payloads.
"""

from __future__ import annotations

import json

import pytest

from tagchart.charts.builders import build_bar, build_schedule
from tagchart.charts.models import (
    BarChart,
    ChartKind,
    ChartOutput,
    GanttTask,
    LineChart,
    PieChart,
    TimeSeriesPoint,
    document_from_dict,
)
from tagchart.domain.records import Record, category_index_from_counts


def _schedule_output() -> ChartOutput:
    return build_schedule(
        {
            "a": Record.from_tags(
                "a", {"start_date": "2025-01-01", "end_date": "2025-01-02", "status": "open"}
            ),
            "b": Record.from_tags(
                "b",
                {"start_date": "2025-01-02", "end_date": "2025-01-03", "depends_on": ["a"]},
            ),
        }
    )


def test_gantt_wire_shape_is_stable() -> None:
    payload = json.loads(_schedule_output().to_json())

    assert set(payload) == {"renderedText", "document"}
    document = payload["document"]
    assert document["type"] == "gantt"
    assert document["dateFormat"] == "YYYY-MM-DD"
    assert document["sections"][0]["tasks"][0] == {
        "id": "a",
        "title": "a",
        "start": "2025-01-01",
        "end": "2025-01-02",
        "status": "open",
        "dependsOn": None,
    }
    assert document["sections"][1]["tasks"][0]["dependsOn"] == "a"


def test_bar_wire_shape_is_stable() -> None:
    index = category_index_from_counts({"status": {"todo": 2}})
    document = build_bar(None, "status", index=index).document.to_dict()

    assert document == {
        "type": "bar",
        "title": "status",
        "xAxis": ["todo"],
        "yAxisLabel": "Count",
        "values": [2],
        "maxValue": 2,
    }


def test_chart_output_json_round_trip() -> None:
    output = _schedule_output()

    restored = ChartOutput.from_json(output.to_json(indent=2))

    assert restored == output
    assert restored.kind is ChartKind.GANTT


def test_line_document_decodes_by_discriminant() -> None:
    chart = LineChart(title="t", series=(TimeSeriesPoint("2025-01-01", 2.5),))

    decoded = document_from_dict(chart.to_dict())

    assert decoded == chart
    assert decoded.max_value == 3  # type: ignore[union-attr]


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"type": "radar", "title": "x"}, "invalid value 'radar'"),
        ({"type": "pie", "title": "x"}, "missing required fields"),
        ({"type": "pie", "title": "x", "categories": [], "extra": 1}, "unexpected fields"),
        ({"type": "pie", "title": "x", "categories": [{"label": "a", "count": -1}]}, "must be >= 0"),
        ({"title": "x"}, "document.type"),
    ],
)
def test_document_decoding_is_strict(payload: dict[str, object], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        document_from_dict(payload)


def test_bar_lengths_must_match() -> None:
    with pytest.raises(ValueError, match="xAxis"):
        BarChart(title="x", x_axis=("a",), values=())


def test_gantt_task_optional_fields_decode_from_null() -> None:
    task = GanttTask.from_dict(
        {"id": "a", "title": "A", "start": "s", "end": "e", "status": None, "dependsOn": None}
    )
    assert task.status is None and task.depends_on is None


def test_typed_decoders_reject_other_chart_kinds() -> None:
    pie_payload = {"type": "pie", "title": "x", "categories": []}

    with pytest.raises(ValueError, match=r"PieChart\.type: expected 'pie', got 'gantt'"):
        PieChart.from_dict({**pie_payload, "type": "gantt"})
    with pytest.raises(ValueError, match="LineChart.type"):
        LineChart.from_dict({"type": "bar", "title": "x", "yAxisLabel": "y", "series": []})

    assert PieChart.from_dict(pie_payload) == PieChart(title="x")
