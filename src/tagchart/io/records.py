"""
Load record snapshots from YAML or JSON files.

Two layouts are accepted::

    # mapping: record id -> tags
    task-a: {status: open, start_date: 2025-01-01}

    # list of record objects
    - id: task-a
      tags: {status: open}
      body: free text
      modifiedAt: 2025-01-02T10:00:00Z

JSON is a subset of YAML, so ``yaml.safe_load`` reads both.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path

import yaml

from tagchart.domain.records import Record


class RecordsLoadError(ValueError):
    """Raised when a records snapshot cannot be read or has the wrong shape."""


def load_records(path: str | Path) -> dict[str, Record]:
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise RecordsLoadError(f"unable to read records file {source}: {exc}") from exc
    return parse_records(text, source=str(source))


def parse_records(text: str, *, source: str = "<records>") -> dict[str, Record]:
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RecordsLoadError(f"invalid YAML/JSON in {source}: {exc}") from exc
    return records_from_payload(payload, source=source)


def records_from_payload(payload: object, *, source: str = "<records>") -> dict[str, Record]:
    """Build records from an already-decoded snapshot."""
    if payload is None:
        return {}
    if isinstance(payload, Mapping):
        return {
            record.id: record
            for record in (
                _record_from_tags(str(record_id), tags, f"{source}[{record_id!r}]")
                for record_id, tags in payload.items()
            )
        }
    if isinstance(payload, list):
        records: dict[str, Record] = {}
        for position, item in enumerate(payload):
            record = _record_from_object(item, f"{source}[{position}]")
            if record.id in records:
                raise RecordsLoadError(f"{source}[{position}].id: duplicate record id {record.id!r}")
            records[record.id] = record
        return records
    raise RecordsLoadError(
        f"{source}: expected a mapping of id -> tags or a list of records, "
        f"got {type(payload).__name__}"
    )


def _record_from_tags(record_id: str, tags: object, path: str) -> Record:
    if tags is None:
        tags = {}
    if not isinstance(tags, Mapping):
        raise RecordsLoadError(f"{path}: tags must be a mapping, got {type(tags).__name__}")
    if not record_id.strip():
        raise RecordsLoadError(f"{path}: record id must not be empty")
    return Record.from_tags(record_id, tags)


def _record_from_object(item: object, path: str) -> Record:
    if not isinstance(item, Mapping):
        raise RecordsLoadError(f"{path}: expected object, got {type(item).__name__}")
    unknown = sorted(str(key) for key in item if key not in {"id", "tags", "body", "modifiedAt"})
    if unknown:
        raise RecordsLoadError(f"{path}: unexpected fields: {unknown}")

    record_id = item.get("id")
    if not isinstance(record_id, str) or not record_id.strip():
        raise RecordsLoadError(f"{path}.id: expected non-empty string")
    tags = item.get("tags") or {}
    if not isinstance(tags, Mapping):
        raise RecordsLoadError(f"{path}.tags: must be a mapping, got {type(tags).__name__}")
    body = item.get("body") or ""
    if not isinstance(body, str):
        raise RecordsLoadError(f"{path}.body: expected string, got {type(body).__name__}")

    return Record.from_tags(
        record_id,
        tags,
        body=body,
        modified_at=_parse_timestamp(item.get("modifiedAt"), f"{path}.modifiedAt"),
    )


def _parse_timestamp(value: object, path: str) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise RecordsLoadError(f"{path}: invalid ISO timestamp {value!r}") from exc
    raise RecordsLoadError(f"{path}: expected timestamp, got {type(value).__name__}")


__all__ = ["RecordsLoadError", "load_records", "parse_records", "records_from_payload"]
