"""
Chart builders: records in, ``ChartOutput`` (document + Mermaid text) out.

All builders are pure functions of their arguments. Orderings are total so
the same records always produce the same document regardless of the order
in which the caller's mapping yields them:

- schedules sort by start date string, then record id;
- distributions sort by category label;
- time series sort by ISO date.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from tagchart.analysis.date_range import DateRangeFilter, record_date
from tagchart.analysis.dependencies import detect_cycles
from tagchart.analysis.metrics import Metric, evaluate_metric
from tagchart.charts.models import (
    BarChart,
    CategoryCount,
    ChartOutput,
    GanttChart,
    GanttSection,
    GanttTask,
    LineChart,
    PieChart,
    TimeSeriesPoint,
)
from tagchart.charts.render import render_chart
from tagchart.config.schema import EngineSettings
from tagchart.domain.records import (
    CategoryIndex,
    Record,
    RecordSet,
    index_records,
    iter_records,
)
from tagchart.domain.values import ValueKind
from tagchart.errors import (
    CycleDetectedError,
    InvalidChartRequestError,
    UnknownCategoryError,
)

logger = structlog.get_logger(__name__)

Records = RecordSet | Iterable[Record]

_DEFAULT_SETTINGS = EngineSettings()
_SINGLE_SECTION = "Tasks"


@dataclass(frozen=True, slots=True)
class ScheduleFieldMapping:
    """Which metadata keys feed each Gantt task attribute.

    ``title=None`` derives the title from the record id. An empty
    ``section`` puts every task into one ``"Tasks"`` section and an empty
    ``depends_on`` disables dependencies.
    """

    title: str | None = None
    start: str = "start_date"
    end: str = "end_date"
    depends_on: str = "depends_on"
    section: str = "status"

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> ScheduleFieldMapping:
        return cls(
            start=settings.start_field,
            end=settings.end_field,
            depends_on=settings.depends_on_field,
            section=settings.section_field,
        )


def build_schedule(
    records: Records,
    mapping: ScheduleFieldMapping | None = None,
    date_filter: DateRangeFilter | None = None,
    *,
    settings: EngineSettings | None = None,
) -> ChartOutput:
    """Build a Gantt chart.

    The dependency relation is checked over *all* records first; any cycle
    raises ``CycleDetectedError`` and nothing is rendered. Records without a
    valid start and end date are skipped. No eligible record yields a chart
    with no sections.
    """

    settings = settings or _DEFAULT_SETTINGS
    mapping = mapping or ScheduleFieldMapping.from_settings(settings)
    all_records = iter_records(records)

    if mapping.depends_on:
        cycles = detect_cycles(
            all_records, mapping.depends_on, max_depth=settings.max_dependency_depth
        )
        if cycles:
            logger.warning("cycle_detected", field=mapping.depends_on, edges=cycles)
            raise CycleDetectedError(cycles)

    eligible = [
        record
        for record in all_records
        if record_date(record, mapping.start) is not None
        and record_date(record, mapping.end) is not None
    ]
    if date_filter is not None and date_filter.is_active:
        eligible = [
            record
            for record in eligible
            if date_filter.matches(record, start_field=mapping.start, end_field=mapping.end)
        ]
    eligible.sort(key=lambda record: (record.string(mapping.start) or "", record.id))

    grouped: dict[str, list[GanttTask]] = {}
    for record in eligible:
        name = _section_name(record, mapping, settings)
        grouped.setdefault(name, []).append(_gantt_task(record, mapping))

    chart = GanttChart(
        title=settings.schedule_title,
        date_format=settings.date_format,
        sections=tuple(GanttSection(name=name, tasks=tuple(tasks)) for name, tasks in grouped.items()),
    )
    if not eligible:
        logger.info("schedule_empty", records=len(all_records))
    else:
        logger.debug("schedule_built", tasks=len(eligible), sections=len(chart.sections))
    return ChartOutput(rendered_text=render_chart(chart), document=chart)


def _section_name(record: Record, mapping: ScheduleFieldMapping, settings: EngineSettings) -> str:
    if not mapping.section:
        return _SINGLE_SECTION
    return record.string(mapping.section) or settings.unclassified_section


def _gantt_task(record: Record, mapping: ScheduleFieldMapping) -> GanttTask:
    title = record.string(mapping.title) if mapping.title else None
    dependencies = record.string_array(mapping.depends_on) if mapping.depends_on else None
    return GanttTask(
        id=record.id,
        title=title or default_title(record.id),
        start=record.string(mapping.start) or "",
        end=record.string(mapping.end) or "",
        status=record.string("status"),
        depends_on=dependencies[0] if dependencies else None,
    )


def default_title(record_id: str) -> str:
    return record_id.replace("-", " ").replace("_", " ")


def build_pie(
    records: Records | None,
    category: str,
    *,
    index: CategoryIndex | None = None,
    date_filter: DateRangeFilter | None = None,
) -> ChartOutput:
    """Distribution of ``category`` values as a pie chart.

    Without an active date filter the category index is used (built from
    ``records`` when not supplied) and an unknown category raises
    ``UnknownCategoryError``. With a filter the records are scanned and an
    unmatched category simply yields an empty chart.
    """

    counts = _category_counts(records, category, index=index, date_filter=date_filter)
    chart = PieChart(
        title=f"{category} Distribution",
        categories=tuple(CategoryCount(label=label, count=counts[label]) for label in sorted(counts)),
    )
    logger.debug("pie_built", category=category, slices=len(chart.categories))
    return ChartOutput(rendered_text=render_chart(chart), document=chart)


def build_bar(
    records: Records | None,
    category: str,
    *,
    index: CategoryIndex | None = None,
    date_filter: DateRangeFilter | None = None,
) -> ChartOutput:
    """Distribution of ``category`` values as a bar chart; same sources as ``build_pie``."""

    counts = _category_counts(records, category, index=index, date_filter=date_filter)
    labels = tuple(sorted(counts))
    values = tuple(counts[label] for label in labels)
    chart = BarChart(
        title=category,
        x_axis=labels,
        y_axis_label="Count",
        values=values,
        max_value=max(values, default=0),
    )
    logger.debug("bar_built", category=category, bars=len(labels))
    return ChartOutput(rendered_text=render_chart(chart), document=chart)


def _category_counts(
    records: Records | None,
    category: str,
    *,
    index: CategoryIndex | None,
    date_filter: DateRangeFilter | None,
) -> dict[str, int]:
    if not category:
        raise InvalidChartRequestError("category must be a non-empty tag key")

    if date_filter is not None and date_filter.is_active:
        if records is None:
            raise InvalidChartRequestError("date-filtered distributions need records to scan")
        selected = [record for record in iter_records(records) if date_filter.matches_field(record)]
        return scan_category(selected, category)

    if index is None:
        if records is None:
            raise InvalidChartRequestError("either records or a category index is required")
        index = index_records(records)
    entry = index.get(category)
    if entry is None:
        logger.info("category_missing", category=category)
        raise UnknownCategoryError(category)
    return dict(entry.values)


def scan_category(records: Iterable[Record], category: str) -> dict[str, int]:
    """Count String values and StringArray elements at ``category``."""
    counts: Counter[str] = Counter()
    for record in records:
        value = record.get(category)
        if value is None:
            continue
        if value.kind is ValueKind.STRING:
            counts[value.value] += 1  # type: ignore[index]
        elif value.kind is ValueKind.STRING_ARRAY:
            counts.update(value.value)  # type: ignore[arg-type]
    return dict(counts)


def build_line(
    records: Records,
    date_field: str,
    y_axis_label: str | None = None,
    metric: Metric | None = None,
    date_filter: DateRangeFilter | None = None,
    *,
    settings: EngineSettings | None = None,
) -> ChartOutput:
    """Time series of ``date_field`` buckets.

    Each bucket's value is ``metric`` evaluated over the bucket, or the number
    of records in it. Filter bounds apply to ``date_field`` unless the filter
    names its own field.
    """

    if not date_field:
        raise InvalidChartRequestError("line charts need a date field")
    settings = settings or _DEFAULT_SETTINGS

    buckets: dict[str, list[Record]] = {}
    for record in iter_records(records):
        day = record_date(record, date_field)
        if day is None:
            continue
        if date_filter is not None and date_filter.is_active:
            if date_filter.field_name is not None:
                if not date_filter.matches_field(record):
                    continue
            elif not date_filter.contains(day):
                continue
        buckets.setdefault(day.isoformat(), []).append(record)

    series = tuple(
        TimeSeriesPoint(
            date=day,
            value=(
                evaluate_metric(metric, buckets[day], max_filter_depth=settings.max_filter_depth)
                if metric is not None
                else float(len(buckets[day]))
            ),
        )
        for day in sorted(buckets)
    )
    subject = metric.name if metric is not None else "Tasks"
    chart = LineChart(
        title=f"{subject} by {date_field}",
        y_axis_label=y_axis_label or settings.default_y_axis_label,
        series=series,
    )
    logger.debug("line_built", date_field=date_field, points=len(series))
    return ChartOutput(rendered_text=render_chart(chart), document=chart)


__all__ = [
    "ScheduleFieldMapping",
    "build_bar",
    "build_line",
    "build_pie",
    "build_schedule",
    "default_title",
    "scan_category",
]
