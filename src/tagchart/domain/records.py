"""Task records and the pre-aggregated category index."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

from tagchart.domain.values import TypedValue, infer_typed_value


@dataclass(frozen=True, slots=True)
class Record:
    """A task: id, typed metadata (insertion ordered), body and mtime."""

    id: str
    metadata: Mapping[str, TypedValue] = field(default_factory=dict)
    body: str = ""
    modified_at: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("Record.id must be a non-empty string")
        frozen: dict[str, TypedValue] = {}
        for key, value in self.metadata.items():
            if not isinstance(value, TypedValue):
                raise TypeError(
                    f"Record.metadata[{key!r}] must be a TypedValue, got {type(value).__name__}"
                )
            frozen[key] = value
        object.__setattr__(self, "metadata", MappingProxyType(frozen))

    @classmethod
    def from_tags(
        cls,
        record_id: str,
        tags: Mapping[str, object],
        *,
        body: str = "",
        modified_at: datetime | None = None,
    ) -> Record:
        """Build a record from decoded front-matter values."""
        return cls(
            id=record_id,
            metadata={str(key): infer_typed_value(value) for key, value in tags.items()},
            body=body,
            modified_at=modified_at,
        )

    @property
    def tag_order(self) -> tuple[str, ...]:
        return tuple(self.metadata)

    def get(self, key: str) -> TypedValue | None:
        return self.metadata.get(key)

    def string(self, key: str) -> str | None:
        value = self.metadata.get(key)
        return value.as_string() if value is not None else None

    def string_array(self, key: str) -> tuple[str, ...] | None:
        value = self.metadata.get(key)
        return value.as_string_array() if value is not None else None

    def number(self, key: str) -> float | None:
        value = self.metadata.get(key)
        return value.as_number() if value is not None else None


RecordSet = Mapping[str, Record]


@dataclass(slots=True)
class CategoryEntry:
    """Occurrence counts for one tag category."""

    name: str
    values: dict[str, int] = field(default_factory=dict)
    task_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "values": dict(sorted(self.values.items())),
            "taskIds": list(self.task_ids),
        }


CategoryIndex = dict[str, CategoryEntry]


def index_records(records: RecordSet | Iterable[Record]) -> CategoryIndex:
    """Aggregate every tag of every record into a category index.

    Values are keyed by their canonical string form, so an array value counts
    once under its bracketed rendering. Records are visited in id order.
    """

    index: CategoryIndex = {}
    for record in sorted(iter_records(records), key=lambda item: item.id):
        for category, value in record.metadata.items():
            entry = index.get(category)
            if entry is None:
                entry = CategoryEntry(name=category)
                index[category] = entry
            if record.id not in entry.task_ids:
                entry.task_ids.append(record.id)
            key = value.to_string_value()
            entry.values[key] = entry.values.get(key, 0) + 1
    return index


def category_index_from_counts(counts: Mapping[str, Mapping[str, int]]) -> CategoryIndex:
    """Build an index from plain ``{category: {value: count}}`` mappings."""
    return {
        name: CategoryEntry(name=name, values={str(k): int(v) for k, v in values.items()})
        for name, values in counts.items()
    }


def iter_records(records: RecordSet | Iterable[Record]) -> list[Record]:
    """Materialize a record collection as a list (mapping values or iterable)."""
    if isinstance(records, Mapping):
        return list(records.values())
    return list(records)


__all__ = [
    "CategoryEntry",
    "CategoryIndex",
    "Record",
    "RecordSet",
    "category_index_from_counts",
    "index_records",
    "iter_records",
]
