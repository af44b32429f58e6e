"""
Source reader protocol / ABC for datasource-ingest.

Every source format implements the same four capabilities:

1. ``open_source()`` -- acquire whatever the reader needs up front
   (check input files exist, connect to the database).
2. ``list_table_units()`` -- yield one ``TableUnit`` per sheet / file /
   XML ``table`` element / database table, in processing order.
3. ``read_field_defs(unit)`` -- the unit's ``Field`` list, or ``None``
   when the unit has fewer header rows than a schema needs.
4. ``read_data_rows(unit)`` -- the unit's raw data rows.

The builder drives these and owns row validation and record assembly,
so readers never parse values themselves.

Resources follow scoped acquisition: readers are context managers and
``close()`` releases every handle.  Close failures are logged, never
raised, so they cannot mask the error that caused the unwind.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from datasource_ingest.model import Field, Record
from datasource_ingest.normalize.assemble import assemble_record
from datasource_ingest.normalize.coerce import make_null_predicate
from datasource_ingest.normalize.rows import matches_field_count

logger = logging.getLogger(__name__)

# Label, name and type rows precede the data in text-based layouts.
HEADER_ROWS = 3


@dataclass(frozen=True)
class TableUnit:
    """One logical source unit that becomes one ``Table``.

    Attributes:
        source: The file path (or database URL) the unit comes from.
        identifier: Raw identifier (sheet name, file name, table name).
        name: Table name resolved from the identifier.
        label: Table label resolved from the identifier.
        index: Position of the unit within its source.
    """

    source: str
    identifier: str
    name: str
    label: str
    index: int = 0


@dataclass(frozen=True)
class DataRow:
    """One raw data row with its source row number."""

    row_number: int
    values: Sequence[Any]


class SourceReader(ABC):
    """Abstract base class for per-format source readers.

    Subclasses set ``format_name`` and implement the four capabilities.
    Text-based readers inherit the default ``assemble()``, which runs
    the value coercer with the configured null sentinel.
    """

    format_name: ClassVar[str] = ""
    # Database rows are typed already; an all-NULL row is still data.
    skip_empty_rows: ClassVar[bool] = True

    def __init__(self, config: Any) -> None:
        self.config = config
        self.is_null = make_null_predicate(getattr(config, "null_string", None))

    def __enter__(self) -> SourceReader:
        self.open_source()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def open_source(self) -> None:
        """Acquire the source.

        Raises:
            SourceUnavailable: If the source cannot be opened.
        """

    @abstractmethod
    def list_table_units(self) -> Iterator[TableUnit]:
        """Yield the table units of the source in processing order."""

    @abstractmethod
    def read_field_defs(self, unit: TableUnit) -> list[Field] | None:
        """Return the unit's fields, or ``None`` if its header is too short.

        Raises:
            FieldDefinitionError: Empty field name or type.
            UndefinedFieldType: Unresolvable type name.
        """

    @abstractmethod
    def read_data_rows(self, unit: TableUnit) -> Iterator[DataRow]:
        """Yield the unit's raw data rows in source order."""

    def fits(self, row: DataRow, fields: Sequence[Field]) -> bool:
        """True if *row* carries one value per field."""
        return matches_field_count(row.values, len(fields))

    def assemble(self, row: DataRow, fields: Sequence[Field]) -> Record:
        return assemble_record(row.row_number, row.values, fields, self.is_null)

    def close(self) -> None:
        """Release all resources held by the reader.  Idempotent."""

    @staticmethod
    def release(resource: Any, what: str) -> None:
        """Close *resource*, logging (not raising) any failure."""
        if resource is None:
            return
        try:
            resource.close()
        except Exception as exc:
            logger.warning("%s close error: %s", what, exc)
