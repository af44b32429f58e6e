"""
Record sorting for datasource-ingest.

``sort_records(table, "dept", "name")`` orders a table's records by one
or more columns.  Values are compared by their text form (the same form
the spreadsheet writer uses), ``None`` sorts after every value, and the
sort is stable.  Tables are immutable, so a new Table is returned.
"""

from __future__ import annotations

from typing import Any

from datasource_ingest.export import format_value
from datasource_ingest.model import Record, Table


def _sort_key(record: Record, columns: tuple[str, ...]) -> tuple[Any, ...]:
    key: list[tuple[bool, str]] = []
    for column in columns:
        value = record[column]
        key.append((value is None, "" if value is None else format_value(value)))
    return tuple(key)


def sort_records(table: Table, *columns: str) -> Table:
    """Return a copy of *table* with records sorted by *columns*.

    Raises:
        KeyError: If a column is not a field of the table.
    """
    for column in columns:
        table.get_field(column)
    if not columns:
        return table
    records = sorted(table.records, key=lambda r: _sort_key(r, columns))
    return Table(name=table.name, label=table.label, fields=table.fields, records=records)
