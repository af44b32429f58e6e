"""
Spreadsheet (Excel ``.xlsx``) reader for datasource-ingest.

Every worksheet of every configured workbook is a table unit.  The sheet
title carries the table identity as ``Name(Label)``.

Sheet layout:
  - Row 0: field labels
  - Row 1: field names
  - Row 2: field type names (STRING, INTEGER, ...)
  - Rows 3+: data, one record per non-empty row

Sheets with fewer than 3 rows are skipped.

Cells are turned into display strings by ``cell_to_text()``:
blank -> ``""``, boolean -> ``"true"``/``"false"``, formula -> the formula
text (not its cached result), date-formatted -> ``yyyy/MM/dd HH:mm:ss``,
other numbers -> decimal string (``"1.0"``), string -> as-is, error -> ``""``.
Only string cells count as textual for DATE/TIME parsing.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterator, Sequence
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.utils.exceptions import InvalidFileException

from datasource_ingest.exceptions import SourceUnavailable
from datasource_ingest.model import Field, Record
from datasource_ingest.normalize.assemble import RawCell, read_field_definitions
from datasource_ingest.normalize.coerce import TIMESTAMP_FORMAT
from datasource_ingest.normalize.names import resolve_table_name
from datasource_ingest.sources.base import HEADER_ROWS, DataRow, SourceReader, TableUnit

logger = logging.getLogger(__name__)

# Time-only cells sit on Excel's day zero.
_EXCEL_DAY_ZERO = date(1899, 12, 31)


def cell_to_text(cell: Cell | None) -> RawCell:
    """Apply the fixed stringification rule to one openpyxl cell."""
    if cell is None or cell.value is None:
        return RawCell("", textual=False)

    value = cell.value
    data_type = cell.data_type

    if data_type == "e":
        return RawCell("", textual=False)
    if data_type == "f":
        formula = getattr(value, "text", value)
        text = str(formula)
        return RawCell(text[1:] if text.startswith("=") else text, textual=False)
    if isinstance(value, bool):
        return RawCell("true" if value else "false", textual=False)
    if isinstance(value, datetime):
        return RawCell(value.strftime(TIMESTAMP_FORMAT), textual=False)
    if isinstance(value, date):
        return RawCell(datetime.combine(value, time()).strftime(TIMESTAMP_FORMAT), textual=False)
    if isinstance(value, time):
        return RawCell(datetime.combine(_EXCEL_DAY_ZERO, value).strftime(TIMESTAMP_FORMAT), textual=False)
    if isinstance(value, (int, float)):
        return RawCell(repr(float(value)), textual=False)
    return RawCell(str(value), textual=True)


def _trim_row(cells: list[RawCell]) -> list[RawCell]:
    """Drop trailing blank cells; they are not values."""
    end = len(cells)
    while end > 0 and cells[end - 1].value == "":
        end -= 1
    return cells[:end]


class SpreadsheetReader(SourceReader):
    """Reader for ``.xlsx`` workbooks."""

    format_name = "xlsx"

    def __init__(self, config: Any) -> None:
        super().__init__(config)
        self._workbook = None
        self._rows: list[list[RawCell]] = []

    def open_source(self) -> None:
        for path in self.config.files:
            if not Path(path).is_file():
                raise SourceUnavailable(f"Workbook not found: {path}")

    def _open_workbook(self, path: str):
        try:
            # data_only=False keeps formula text instead of cached results
            return load_workbook(path, data_only=False)
        except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as exc:
            raise SourceUnavailable(f"Cannot open workbook {path}: {exc}") from exc

    def list_table_units(self) -> Iterator[TableUnit]:
        for path in self.config.files:
            logger.info("Reading workbook %s", path)
            self._workbook = self._open_workbook(path)
            try:
                for index, sheet in enumerate(self._workbook.worksheets):
                    self._rows = [
                        [cell_to_text(c) for c in row] for row in sheet.iter_rows()
                    ]
                    name, label = resolve_table_name(sheet.title)
                    logger.debug("Sheet '%s': %d rows", sheet.title, len(self._rows))
                    yield TableUnit(
                        source=str(path),
                        identifier=sheet.title,
                        name=name,
                        label=label,
                        index=index,
                    )
            finally:
                self.close()

    def read_field_defs(self, unit: TableUnit) -> list[Field] | None:
        if len(self._rows) < HEADER_ROWS:
            return None
        label_row, name_row, type_row = (
            [c.value for c in row] for row in self._rows[:HEADER_ROWS]
        )
        return read_field_definitions(label_row, name_row, type_row)

    def read_data_rows(self, unit: TableUnit) -> Iterator[DataRow]:
        for offset, cells in enumerate(self._rows[HEADER_ROWS:]):
            yield DataRow(row_number=HEADER_ROWS + offset, values=_trim_row(cells))

    def fits(self, row: DataRow, fields: Sequence[Field]) -> bool:
        # Short rows are legal: blank trailing cells are simply absent.
        return len(row.values) <= len(fields)

    def assemble(self, row: DataRow, fields: Sequence[Field]) -> Record:
        # Trailing blank cells were trimmed; pad back to the schema width.
        values = list(row.values)
        values.extend(RawCell("", textual=False) for _ in range(len(fields) - len(values)))
        return super().assemble(DataRow(row.row_number, values), fields)

    def close(self) -> None:
        workbook, self._workbook = self._workbook, None
        self._rows = []
        self.release(workbook, "Workbook")
