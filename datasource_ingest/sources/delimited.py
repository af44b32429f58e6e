"""
Delimited text (CSV) reader for datasource-ingest.

Each configured file is one table unit; the table identity comes from the
file name (``Name(Label).csv``).  The first three lines are the label,
name and type rows, every further line is a data row.

Tokenizing uses the stdlib ``csv`` module rather than ``pandas.read_csv``:
rows must keep their own value count so that short or long rows can be
reported and skipped instead of being padded into a rectangle.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from datasource_ingest.exceptions import SourceUnavailable
from datasource_ingest.model import Field
from datasource_ingest.normalize.assemble import read_field_definitions
from datasource_ingest.normalize.names import resolve_file_table_name
from datasource_ingest.sources.base import HEADER_ROWS, DataRow, SourceReader, TableUnit

logger = logging.getLogger(__name__)


class DelimitedReader(SourceReader):
    """Reader for delimited text files."""

    format_name = "csv"

    def __init__(self, config: Any) -> None:
        super().__init__(config)
        self._handle = None
        self._rows: list[list[str]] = []

    def open_source(self) -> None:
        for path in self.config.files:
            if not Path(path).is_file():
                raise SourceUnavailable(f"Input file not found: {path}")

    def _read_rows(self, path: str) -> list[list[str]]:
        try:
            self._handle = open(path, "r", newline="", encoding=self.config.charset)
            return list(csv.reader(self._handle, delimiter=self.config.delimiter))
        except (OSError, LookupError, UnicodeDecodeError, csv.Error) as exc:
            raise SourceUnavailable(f"Cannot read {path}: {exc}") from exc
        finally:
            self.close()

    def list_table_units(self) -> Iterator[TableUnit]:
        for index, path in enumerate(self.config.files):
            logger.info("Reading %s (charset=%s)", path, self.config.charset)
            self._rows = self._read_rows(str(path))
            name, label = resolve_file_table_name(Path(path).name)
            logger.debug("File '%s': %d lines", path, len(self._rows))
            yield TableUnit(
                source=str(path),
                identifier=Path(path).name,
                name=name,
                label=label,
                index=index,
            )
            self._rows = []

    def read_field_defs(self, unit: TableUnit) -> list[Field] | None:
        if len(self._rows) < HEADER_ROWS:
            return None
        label_row, name_row, type_row = self._rows[:HEADER_ROWS]
        # Every delimited column is declared, trailing ones included.
        return read_field_definitions(label_row, name_row, type_row, trim_trailing=False)

    def read_data_rows(self, unit: TableUnit) -> Iterator[DataRow]:
        for offset, values in enumerate(self._rows[HEADER_ROWS:]):
            yield DataRow(row_number=HEADER_ROWS + offset, values=values)

    def close(self) -> None:
        handle, self._handle = self._handle, None
        self.release(handle, "File")
