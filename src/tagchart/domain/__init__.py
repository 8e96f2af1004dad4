"""Domain types: typed tag values and task records."""

from tagchart.domain.records import (
    CategoryEntry,
    CategoryIndex,
    Record,
    RecordSet,
    category_index_from_counts,
    index_records,
    iter_records,
)
from tagchart.domain.values import (
    TypedValue,
    ValueKind,
    format_number,
    infer_typed_value,
    parse_scalar_text,
)

__all__ = [
    "CategoryEntry",
    "CategoryIndex",
    "Record",
    "RecordSet",
    "TypedValue",
    "ValueKind",
    "category_index_from_counts",
    "format_number",
    "index_records",
    "infer_typed_value",
    "iter_records",
    "parse_scalar_text",
]
