"""Persist chart outputs: JSON export/import and Markdown analysis reports."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from tagchart.charts.models import ChartOutput

DEFAULT_REPORT_TITLE = "Analysis Report"

logger = structlog.get_logger(__name__)


def export_chart_json(output: ChartOutput, path: str | Path, *, indent: int = 2) -> Path:
    """Write ``output`` as JSON to ``path`` and return normalized path."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output.to_json(indent=indent) + "\n", encoding="utf-8")
    logger.info("chart_exported", path=str(output_path), kind=output.kind.value)
    return output_path


def load_chart_json(path: str | Path) -> ChartOutput:
    """Read a ChartOutput previously written by ``export_chart_json``."""

    return ChartOutput.from_json(Path(path).read_text(encoding="utf-8"))


def render_analysis_report(blocks: Iterable[str], title: str | None = None) -> str:
    """Markdown document with one fenced ``mermaid`` block per chart."""

    parts = [f"# {title or DEFAULT_REPORT_TITLE}\n\n"]
    for number, block in enumerate(blocks, start=1):
        parts.append(f"## Chart {number}\n\n```mermaid\n{block}\n```\n\n")
    return "".join(parts)


def write_analysis_report(
    path: str | Path, blocks: Iterable[str], title: str | None = None
) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_analysis_report(blocks, title), encoding="utf-8")
    logger.info("report_written", path=str(output_path))
    return output_path


__all__ = [
    "DEFAULT_REPORT_TITLE",
    "export_chart_json",
    "load_chart_json",
    "render_analysis_report",
    "write_analysis_report",
]
