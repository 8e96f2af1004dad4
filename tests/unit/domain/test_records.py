"""
tagchart - unit tests for records and the category index

File: tests/unit/domain/test_records.py

Purpose
- Validate record construction invariants and deterministic category indexing.
"""

from __future__ import annotations

import pytest

from tagchart.domain.records import (
    Record,
    category_index_from_counts,
    index_records,
    iter_records,
)
from tagchart.domain.values import TypedValue


def test_record_metadata_is_read_only_and_ordered() -> None:
    record = Record.from_tags("task-a", {"status": "open", "points": 3, "tags": ["x"]})

    assert record.tag_order == ("status", "points", "tags")
    assert record.string("status") == "open"
    assert record.number("points") == 3.0
    assert record.string_array("tags") == ("x",)
    assert record.get("missing") is None
    with pytest.raises(TypeError):
        record.metadata["status"] = TypedValue.string("done")  # type: ignore[index]


def test_record_rejects_empty_id_and_untyped_values() -> None:
    with pytest.raises(ValueError, match="non-empty"):
        Record(id="")
    with pytest.raises(TypeError, match="TypedValue"):
        Record(id="a", metadata={"status": "open"})  # type: ignore[dict-item]


def test_index_records_counts_canonical_values_in_id_order() -> None:
    records = {
        "b": Record.from_tags("b", {"status": "todo", "labels": ["x", "y"]}),
        "a": Record.from_tags("a", {"status": "todo"}),
        "c": Record.from_tags("c", {"status": "done"}),
    }

    index = index_records(records)

    assert index["status"].values == {"todo": 2, "done": 1}
    assert index["status"].task_ids == ["a", "b", "c"]
    assert index["labels"].values == {"[x, y]": 1}
    assert index["status"].to_dict() == {
        "name": "status",
        "values": {"done": 1, "todo": 2},
        "taskIds": ["a", "b", "c"],
    }


def test_category_index_from_counts_and_iter_records() -> None:
    index = category_index_from_counts({"status": {"todo": 2, "done": 1}})
    assert index["status"].values == {"todo": 2, "done": 1}
    assert index["status"].task_ids == []

    record = Record.from_tags("a", {})
    assert iter_records({"a": record}) == [record]
    assert iter_records(iter([record])) == [record]
