"""Inclusive date-range filtering for chart builders."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Final

from tagchart.domain.records import Record

_ISO_DATE: Final[re.Pattern[str]] = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: object) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` string; anything else yields ``None``."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def record_date(record: Record, field: str) -> date | None:
    """Date stored as a String at ``field``, or ``None`` when absent/invalid."""
    return parse_iso_date(record.string(field))


@dataclass(frozen=True, slots=True)
class DateRangeFilter:
    """
    ``(field?, start?, end?)`` with inclusive, independently optional bounds.

    Bounds that do not parse as ISO dates are treated as absent. With a
    ``field`` a record matches when its date at that field lies inside the
    bounds; without one, schedule charts test the record's own span for
    overlap instead (see ``overlaps``).
    """

    field: str | None = None
    start: str | None = None
    end: str | None = None

    @property
    def start_date(self) -> date | None:
        return parse_iso_date(self.start)

    @property
    def end_date(self) -> date | None:
        return parse_iso_date(self.end)

    @property
    def field_name(self) -> str | None:
        return self.field or None

    @property
    def is_active(self) -> bool:
        return (
            self.field_name is not None
            or self.start_date is not None
            or self.end_date is not None
        )

    def contains(self, day: date) -> bool:
        lower, upper = self.start_date, self.end_date
        if lower is not None and day < lower:
            return False
        if upper is not None and day > upper:
            return False
        return True

    def overlaps(self, span_start: date, span_end: date) -> bool:
        lower, upper = self.start_date, self.end_date
        if upper is not None and span_start > upper:
            return False
        if lower is not None and span_end < lower:
            return False
        return True

    def matches_field(self, record: Record, field: str | None = None) -> bool:
        """Point containment of the record's date at ``field`` (or ``self.field``)."""
        key = field or self.field_name
        if key is None:
            return True
        day = record_date(record, key)
        return day is not None and self.contains(day)

    def matches_span(self, record: Record, start_field: str, end_field: str) -> bool:
        span_start = record_date(record, start_field)
        span_end = record_date(record, end_field)
        if span_start is None or span_end is None:
            return False
        return self.overlaps(span_start, span_end)

    def matches(self, record: Record, *, start_field: str, end_field: str) -> bool:
        """Schedule semantics: named field containment, else span overlap."""
        if self.field_name is not None:
            return self.matches_field(record)
        return self.matches_span(record, start_field, end_field)


__all__ = ["DateRangeFilter", "parse_iso_date", "record_date"]
