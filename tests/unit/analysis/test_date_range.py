"""
tagchart - unit tests for inclusive date-range filtering

File: tests/unit/analysis/test_date_range.py

Purpose
- Strict ISO date parsing, inclusive bounds, and point vs span matching.
"""

from __future__ import annotations

from datetime import date

import pytest

from tagchart.analysis.date_range import DateRangeFilter, parse_iso_date, record_date
from tagchart.domain.records import Record


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2025-02-01", date(2025, 2, 1)),
        ("2025-02-30", None),
        ("2025-2-1", None),
        ("20250201", None),
        ("2025-02-01T10:00", None),
        (None, None),
        (20250201, None),
    ],
)
def test_parse_iso_date_is_strict(raw: object, expected: date | None) -> None:
    assert parse_iso_date(raw) == expected


def test_february_due_dates_scenario() -> None:
    records = [
        Record.from_tags("jan", {"due": "2025-01-31"}),
        Record.from_tags("feb-first", {"due": "2025-02-01"}),
        Record.from_tags("feb-mid", {"due": "2025-02-14"}),
        Record.from_tags("feb-last", {"due": "2025-02-28"}),
        Record.from_tags("mar", {"due": "2025-03-01"}),
        Record.from_tags("undated", {}),
        Record.from_tags("garbled", {"due": "soon"}),
    ]
    february = DateRangeFilter(field="due", start="2025-02-01", end="2025-02-28")

    assert [record.id for record in records if february.matches_field(record)] == [
        "feb-first",
        "feb-mid",
        "feb-last",
    ]


def test_open_ended_and_invalid_bounds() -> None:
    day = date(2025, 6, 1)

    assert DateRangeFilter(start="2025-05-01").contains(day)
    assert not DateRangeFilter(start="2025-07-01").contains(day)
    assert DateRangeFilter(end="2025-06-01").contains(day)
    assert DateRangeFilter(start="not-a-date", end="2025-13-01").contains(day)
    assert not DateRangeFilter(start="not-a-date").is_active
    assert DateRangeFilter(field="due").is_active
    assert not DateRangeFilter(field="").is_active


def test_span_overlap_for_schedules() -> None:
    record = Record.from_tags("t", {"start_date": "2025-01-25", "end_date": "2025-02-03"})
    february = DateRangeFilter(start="2025-02-01", end="2025-02-28")
    march = DateRangeFilter(start="2025-03-01")

    assert february.matches(record, start_field="start_date", end_field="end_date")
    assert not march.matches(record, start_field="start_date", end_field="end_date")
    assert not february.matches(
        Record.from_tags("u", {"start_date": "2025-02-02"}),
        start_field="start_date",
        end_field="end_date",
    )


def test_named_field_takes_precedence_over_span() -> None:
    record = Record.from_tags(
        "t", {"start_date": "2025-01-01", "end_date": "2025-01-05", "due": "2025-02-10"}
    )
    by_due = DateRangeFilter(field="due", start="2025-02-01", end="2025-02-28")

    assert by_due.matches(record, start_field="start_date", end_field="end_date")
    assert record_date(record, "due") == date(2025, 2, 10)
    assert DateRangeFilter().matches_field(record)
