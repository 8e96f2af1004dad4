"""Command-line interface router for tagchart."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from tagchart.analysis.date_range import DateRangeFilter
from tagchart.analysis.dependencies import detect_cycles
from tagchart.analysis.metrics import Metric, evaluate_metric
from tagchart.charts.builders import (
    ScheduleFieldMapping,
    build_bar,
    build_line,
    build_pie,
    build_schedule,
)
from tagchart.charts.export import export_chart_json, write_analysis_report
from tagchart.charts.models import ChartOutput
from tagchart.config import (
    ConfigLoadError,
    ConfigValidationError,
    EngineSettings,
    load_config,
)
from tagchart.domain.records import Record
from tagchart.domain.values import format_number
from tagchart.io.records import RecordsLoadError, load_records
from tagchart.observability.logging import setup_logging, shutdown_logging

DEFAULT_RECORDS_PATH: Final[str] = "records.yaml"
CHART_KINDS: Final[tuple[str, ...]] = ("gantt", "pie", "bar", "line")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class _Context:
    settings: EngineSettings
    records: dict[str, Record]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="tagchart",
        description=(
            "tagchart - charts and metrics over tagged task records.\n\n"
            "Common workflows:\n"
            "  tagchart gantt --records tasks.yaml       Mermaid Gantt schedule\n"
            "  tagchart pie status                        Status distribution\n"
            "  tagchart line due --metric @metric.json    Metric over time\n"
            "  tagchart cycles                            Check depends_on for cycles\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--records",
        dest="records_path",
        default=DEFAULT_RECORDS_PATH,
        help=f"YAML/JSON records snapshot (default: ./{DEFAULT_RECORDS_PATH}).",
    )
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to tagchart TOML config (default: ./tagchart.toml if present).",
    )
    common.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default="text",
        help="Emit diagram text or the full ChartOutput JSON.",
    )
    common.add_argument("--output", default=None, help="Write the result to this file.")
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log engine events at DEBUG level.",
    )

    date_range = argparse.ArgumentParser(add_help=False)
    date_range.add_argument("--filter-field", default=None, help="Date field to filter on.")
    date_range.add_argument("--from", dest="date_from", default=None, help="Inclusive YYYY-MM-DD.")
    date_range.add_argument("--to", dest="date_to", default=None, help="Inclusive YYYY-MM-DD.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    gantt_parser = subparsers.add_parser(
        "gantt", parents=[common, date_range], help="Build a Gantt schedule."
    )
    gantt_parser.add_argument("--title-field", default=None)
    gantt_parser.add_argument("--start-field", default=None)
    gantt_parser.add_argument("--end-field", default=None)
    gantt_parser.add_argument("--depends-on-field", default=None)
    gantt_parser.add_argument("--section-field", default=None)
    gantt_parser.set_defaults(handler=_cmd_gantt)

    for name, handler in (("pie", _cmd_pie), ("bar", _cmd_bar)):
        distribution_parser = subparsers.add_parser(
            name, parents=[common, date_range], help=f"Build a {name} chart of one tag."
        )
        distribution_parser.add_argument("category", help="Tag key to count values of.")
        distribution_parser.set_defaults(handler=handler)

    line_parser = subparsers.add_parser(
        "line", parents=[common, date_range], help="Build a time series over a date tag."
    )
    line_parser.add_argument("date_field", help="Tag key holding YYYY-MM-DD dates.")
    line_parser.add_argument("--y-label", default=None)
    line_parser.add_argument("--metric", default=None, help="Metric JSON, or @path to a file.")
    line_parser.set_defaults(handler=_cmd_line)

    cycles_parser = subparsers.add_parser(
        "cycles", parents=[common], help="Report dependency cycles (exit 1 when found)."
    )
    cycles_parser.add_argument("--depends-on-field", default=None)
    cycles_parser.set_defaults(handler=_cmd_cycles)

    metric_parser = subparsers.add_parser(
        "metric", parents=[common], help="Evaluate one metric over all records."
    )
    metric_parser.add_argument("metric", help="Metric JSON, or @path to a file.")
    metric_parser.set_defaults(handler=_cmd_metric)

    report_parser = subparsers.add_parser(
        "report", parents=[common], help="Write a Markdown report of several charts."
    )
    report_parser.add_argument(
        "--chart",
        dest="charts",
        action="append",
        required=True,
        metavar="KIND[:ARG]",
        help="gantt, pie:CATEGORY, bar:CATEGORY or line:DATE_FIELD (repeatable).",
    )
    report_parser.add_argument("--out", dest="report_path", required=True)
    report_parser.add_argument("--title", default=None)
    report_parser.set_defaults(handler=_cmd_report)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        return int(handler(namespace))
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_gantt(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    defaults = ScheduleFieldMapping.from_settings(ctx.settings)
    mapping = ScheduleFieldMapping(
        title=_optional_str(args.title_field),
        start=_optional_str(args.start_field) or defaults.start,
        end=_optional_str(args.end_field) or defaults.end,
        depends_on=defaults.depends_on if args.depends_on_field is None else args.depends_on_field,
        section=defaults.section if args.section_field is None else args.section_field,
    )
    output = build_schedule(ctx.records, mapping, _date_filter(args), settings=ctx.settings)
    return _emit_chart(args, output)


def _cmd_pie(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    output = build_pie(ctx.records, args.category, date_filter=_date_filter(args))
    return _emit_chart(args, output)


def _cmd_bar(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    output = build_bar(ctx.records, args.category, date_filter=_date_filter(args))
    return _emit_chart(args, output)


def _cmd_line(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    metric = _load_metric(args.metric, ctx.settings) if args.metric else None
    output = build_line(
        ctx.records,
        args.date_field,
        y_axis_label=_optional_str(args.y_label),
        metric=metric,
        date_filter=_date_filter(args),
        settings=ctx.settings,
    )
    return _emit_chart(args, output)


def _cmd_cycles(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    field = (
        ctx.settings.depends_on_field if args.depends_on_field is None else args.depends_on_field
    )
    edges = detect_cycles(ctx.records, field, max_depth=ctx.settings.max_dependency_depth)
    if args.output_format == "json":
        _emit(args, _json_text({"acyclic": not edges, "cycles": edges}))
    elif edges:
        _emit(args, "\n".join(edges))
    else:
        _emit(args, "no dependency cycles")
    return 1 if edges else 0


def _cmd_metric(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    metric = _load_metric(args.metric, ctx.settings)
    value = evaluate_metric(metric, ctx.records, max_filter_depth=ctx.settings.max_filter_depth)
    if args.output_format == "json":
        payload = {"metric": metric.to_dict(), "records": len(ctx.records), "value": value}
        _emit(args, _json_text(payload))
    else:
        _emit(args, format_number(value))
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    ctx = _prepare(args)
    blocks: list[str] = []
    for entry in args.charts:
        kind, _, argument = entry.partition(":")
        kind = kind.strip().lower()
        argument = argument.strip()
        if kind not in CHART_KINDS:
            raise CLIError(f"unknown chart kind {kind!r}; expected one of: {', '.join(CHART_KINDS)}")
        if kind != "gantt" and not argument:
            raise CLIError(f"chart {kind!r} needs an argument, e.g. {kind}:status")
        if kind == "gantt":
            output = build_schedule(ctx.records, settings=ctx.settings)
        elif kind == "pie":
            output = build_pie(ctx.records, argument)
        elif kind == "bar":
            output = build_bar(ctx.records, argument)
        else:
            output = build_line(ctx.records, argument, settings=ctx.settings)
        blocks.append(output.rendered_text)
    path = write_analysis_report(args.report_path, blocks, _optional_str(args.title))
    print(str(path))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _prepare(args: argparse.Namespace) -> _Context:
    config = _load_effective_config(args)
    setup_logging(config.get("observability"), level="DEBUG" if args.verbose else None)
    try:
        records = load_records(args.records_path)
    except RecordsLoadError as exc:
        raise CLIError(str(exc), exit_code=3) from exc
    return _Context(settings=EngineSettings.from_config(config), records=records)


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    try:
        return load_config(_optional_str(getattr(args, "config_path", None)))
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _load_metric(raw: str, settings: EngineSettings) -> Metric:
    text = raw
    if raw.startswith("@"):
        try:
            text = Path(raw[1:]).expanduser().read_text(encoding="utf-8")
        except OSError as exc:
            raise CLIError(f"unable to read metric file {raw[1:]}: {exc}", exit_code=3) from exc
    return Metric.from_json(text, max_filter_depth=settings.max_filter_depth)


def _date_filter(args: argparse.Namespace) -> DateRangeFilter:
    return DateRangeFilter(
        field=_optional_str(args.filter_field),
        start=_optional_str(args.date_from),
        end=_optional_str(args.date_to),
    )


def _emit_chart(args: argparse.Namespace, output: ChartOutput) -> int:
    if args.output_format == "json":
        if args.output:
            export_chart_json(output, args.output)
            return 0
        print(output.to_json())
        return 0
    _emit(args, output.rendered_text)
    return 0


def _emit(args: argparse.Namespace, text: str) -> None:
    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        return
    print(text)


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _json_text(payload: Mapping[str, object]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


__all__ = ["CLIError", "build_parser", "run_cli"]
