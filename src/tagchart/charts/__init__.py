"""Chart documents, builders, Mermaid rendering and export."""

from tagchart.charts.builders import (
    ScheduleFieldMapping,
    build_bar,
    build_line,
    build_pie,
    build_schedule,
    scan_category,
)
from tagchart.charts.export import (
    export_chart_json,
    load_chart_json,
    render_analysis_report,
    write_analysis_report,
)
from tagchart.charts.models import (
    BarChart,
    CategoryCount,
    ChartDocument,
    ChartKind,
    ChartOutput,
    GanttChart,
    GanttSection,
    GanttTask,
    LineChart,
    PieChart,
    TimeSeriesPoint,
    document_from_dict,
)
from tagchart.charts.render import render_chart

__all__ = [
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
    "ScheduleFieldMapping",
    "TimeSeriesPoint",
    "build_bar",
    "build_line",
    "build_pie",
    "build_schedule",
    "document_from_dict",
    "export_chart_json",
    "load_chart_json",
    "render_analysis_report",
    "render_chart",
    "scan_category",
    "write_analysis_report",
]
