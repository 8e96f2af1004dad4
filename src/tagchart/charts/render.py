"""
Mermaid diagram text for chart documents.

Every function here is a pure projection of the document it receives: the
output only contains values already present on the document (plus the axis
headroom ``max + 5``), so identical documents always render identically.
"""

from __future__ import annotations

import math

from tagchart.charts.models import (
    BarChart,
    ChartDocument,
    GanttChart,
    GanttTask,
    LineChart,
    PieChart,
)

INDENT = "    "
AXIS_HEADROOM = 5


def render_chart(document: ChartDocument) -> str:
    if isinstance(document, GanttChart):
        return render_gantt(document)
    if isinstance(document, PieChart):
        return render_pie(document)
    if isinstance(document, BarChart):
        return render_bar(document)
    if isinstance(document, LineChart):
        return render_line(document)
    raise TypeError(f"unsupported chart document: {type(document).__name__}")


def render_gantt(chart: GanttChart) -> str:
    lines = [
        "gantt",
        f"{INDENT}dateFormat  {chart.date_format}",
        f"{INDENT}title       {chart.title}",
        "",
    ]
    for section in chart.sections:
        lines.append(f"{INDENT}section {section.name}")
        lines.extend(_gantt_task_line(task) for task in section.tasks)
    return "\n".join(lines)


def dependency_slug(task_id: str) -> str:
    """Mermaid-safe reference to a task id."""
    return task_id.replace("-", "_").replace(" ", "_")


def _gantt_task_line(task: GanttTask) -> str:
    if task.depends_on:
        return (
            f"{INDENT}{task.title} :after {dependency_slug(task.depends_on)}, "
            f"{task.start}~{task.end}"
        )
    return f"{INDENT}{task.title} :{task.start}, {task.end}"


def render_pie(chart: PieChart) -> str:
    lines = ["pie", f"{INDENT}title {chart.title}"]
    lines.extend(f'{INDENT}"{item.label}" : {item.count}' for item in chart.categories)
    return "\n".join(lines)


def render_bar(chart: BarChart) -> str:
    lines = _xychart_header(chart.title, chart.x_axis)
    lines.append(f'{INDENT}y-axis "{chart.y_axis_label}" 0 --> {chart.max_value + AXIS_HEADROOM}')
    lines.append(f"{INDENT}bar [{', '.join(str(value) for value in chart.values)}]")
    return "\n".join(lines)


def render_line(chart: LineChart) -> str:
    lines = _xychart_header(chart.title, tuple(point.date for point in chart.series))
    lines.append(f'{INDENT}y-axis "{chart.y_axis_label}" 0 --> {chart.max_value + AXIS_HEADROOM}')
    lines.append(
        f"{INDENT}line [{', '.join(format_series_value(point.value) for point in chart.series)}]"
    )
    return "\n".join(lines)


def format_series_value(value: float) -> str:
    """Whole values print as integers, everything else with one decimal."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def _xychart_header(title: str, labels: tuple[str, ...]) -> list[str]:
    quoted = ", ".join(f'"{label}"' for label in labels)
    return [
        "xychart-beta",
        f'{INDENT}title "{title}"',
        f"{INDENT}x-axis [",
        f"{INDENT}{INDENT}{quoted}",
        f"{INDENT}]",
    ]


__all__ = [
    "dependency_slug",
    "format_series_value",
    "render_bar",
    "render_chart",
    "render_gantt",
    "render_line",
    "render_pie",
]
