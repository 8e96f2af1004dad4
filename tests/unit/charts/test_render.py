"""
tagchart - unit tests for Mermaid rendering

File: tests/unit/charts/test_render.py

Purpose
- Every title, date, label and count on a document shows up in its rendered text.
- Rendering is a pure function of the document.
"""

from __future__ import annotations

import pytest

from tagchart.charts.models import (
    BarChart,
    CategoryCount,
    ChartDocument,
    GanttChart,
    GanttSection,
    GanttTask,
    LineChart,
    PieChart,
    TimeSeriesPoint,
)
from tagchart.charts.render import dependency_slug, format_series_value, render_chart

GANTT = GanttChart(
    title="Release plan",
    sections=(
        GanttSection(
            name="open",
            tasks=(
                GanttTask("design", "Design", "2025-01-01", "2025-01-04"),
                GanttTask("build-ui", "Build UI", "2025-01-05", "2025-01-09", depends_on="design"),
            ),
        ),
        GanttSection(
            name="done",
            tasks=(GanttTask("qa", "QA", "2025-01-10", "2025-01-11", depends_on="build-ui v2"),),
        ),
    ),
)
PIE = PieChart(title="status Distribution", categories=(CategoryCount("done", 3), CategoryCount("todo", 7)))
BAR = BarChart(title="priority", x_axis=("high", "low"), values=(2, 11), max_value=11)
LINE = LineChart(
    title="Tasks by due",
    series=(TimeSeriesPoint("2025-02-01", 1.0), TimeSeriesPoint("2025-02-02", 2.25)),
)


@pytest.mark.parametrize(
    ("document", "fragments"),
    [
        (
            GANTT,
            [
                "title       Release plan",
                "section open",
                "section done",
                "Design :2025-01-01, 2025-01-04",
                "Build UI :after design, 2025-01-05~2025-01-09",
                "QA :after build_ui_v2, 2025-01-10~2025-01-11",
            ],
        ),
        (PIE, ["title status Distribution", '"done" : 3', '"todo" : 7']),
        (BAR, ['title "priority"', '"high", "low"', "0 --> 16", "bar [2, 11]"]),
        (LINE, ['title "Tasks by due"', '"2025-02-01", "2025-02-02"', "0 --> 8", "line [1, 2.2]"]),
    ],
)
def test_rendered_text_carries_document_values(document: ChartDocument, fragments: list[str]) -> None:
    text = render_chart(document)
    for fragment in fragments:
        assert fragment in text
    assert render_chart(document) == text


def test_first_line_names_the_diagram() -> None:
    assert render_chart(GANTT).splitlines()[0] == "gantt"
    assert render_chart(PIE).splitlines()[0] == "pie"
    assert render_chart(BAR).splitlines()[0] == "xychart-beta"
    assert render_chart(LINE).splitlines()[0] == "xychart-beta"


def test_helpers() -> None:
    assert dependency_slug("a-b c") == "a_b_c"
    assert format_series_value(3.0) == "3"
    assert format_series_value(0.25) == "0.2"
    assert format_series_value(1.75) == "1.8"


def test_unsupported_document() -> None:
    with pytest.raises(TypeError):
        render_chart("gantt")  # type: ignore[arg-type]
