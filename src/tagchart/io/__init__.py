"""Input adapters that turn files into in-memory records."""

from tagchart.io.records import RecordsLoadError, load_records, parse_records, records_from_payload

__all__ = ["RecordsLoadError", "load_records", "parse_records", "records_from_payload"]
