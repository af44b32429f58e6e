"""
Exporter for datasource-ingest.

Two output paths:

- ``write_spreadsheet()`` writes a Datasource back out as an ``.xlsx``
  workbook in the same layout the spreadsheet reader accepts, so the
  written file builds again into an equal Datasource.
- ``export_tables()`` converts every table to a pandas DataFrame and
  writes one file per table (CSV or Parquet).

Workbook layout (one sheet per table, titled ``name(label)`` or ``name``):
  - Row 0: field labels
  - Row 1: field names
  - Row 2: field type names
  - Rows 3+: records, ``None`` written as ``(NULL)``

Values are written as text in the forms the coercer parses: booleans as
``true``/``false``, temporal values in the ``yyyy/MM/dd HH:mm:ss`` family
of patterns.

CSV files are written with ``utf-8-sig`` encoding (BOM) so that
non-ASCII labels display correctly when opened in Excel.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Literal

import pandas as pd
from openpyxl import Workbook

from datasource_ingest.exceptions import ExportError
from datasource_ingest.field_types import FieldType
from datasource_ingest.model import Datasource, Table
from datasource_ingest.normalize.coerce import (
    DATE_FORMAT,
    DEFAULT_NULL_STRING,
    TIME_FORMAT,
    TIMESTAMP_FORMAT,
)

logger = logging.getLogger(__name__)

_SUPPORTED_FORMATS = {"csv", "parquet"}

# FieldType -> pandas dtype; temporal date/time columns stay object.
_PANDAS_DTYPES: dict[FieldType, str] = {
    FieldType.STRING: "string",
    FieldType.BOOLEAN: "boolean",
    FieldType.INTEGER: "Int32",
    FieldType.LONG: "Int64",
    FieldType.FLOAT: "Float64",
    FieldType.DOUBLE: "Float64",
    FieldType.TIMESTAMP: "datetime64[ns]",
}


# ---------------------------------------------------------------------------
# Spreadsheet
# ---------------------------------------------------------------------------

def format_value(value: Any, null_string: str = DEFAULT_NULL_STRING) -> str:
    """Render one record value in the text form the reader parses back."""
    if value is None:
        return null_string
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, time):
        return value.strftime(TIME_FORMAT)
    if isinstance(value, float):
        return repr(value)
    return str(value)


def sheet_title(table: Table) -> str:
    """``name(label)``, or just ``name`` when the label equals the name.

    An empty label is written as ``name()`` so it reads back empty.
    """
    if table.label == table.name:
        return table.name
    return f"{table.name}({table.label})"


def _write_row(sheet, row_index: int, values: list[str]) -> None:
    for col, text in enumerate(values, start=1):
        cell = sheet.cell(row=row_index, column=col, value=text)
        if text.startswith("="):
            # Keep literal text that openpyxl would otherwise store as a formula.
            cell.data_type = "s"


def write_spreadsheet(
    datasource: Datasource,
    path: str | Path,
    null_string: str = DEFAULT_NULL_STRING,
) -> Path:
    """Write *datasource* to an ``.xlsx`` workbook, one sheet per table.

    Args:
        datasource: The Datasource to write.
        path: Output workbook path (parent directories are created).
        null_string: Text written for ``None`` values.

    Returns:
        The written path.

    Raises:
        ExportError: If a sheet title is invalid or the write fails.
    """
    path = Path(path)
    workbook = Workbook()
    try:
        if datasource.tables:
            workbook.remove(workbook.active)
        for table in datasource.tables:
            sheet = workbook.create_sheet(title=sheet_title(table))
            _write_row(sheet, 1, [f.label for f in table.fields])
            _write_row(sheet, 2, [f.name for f in table.fields])
            _write_row(sheet, 3, [str(f.type) for f in table.fields])
            for offset, record in enumerate(table.records):
                _write_row(
                    sheet,
                    4 + offset,
                    [format_value(record[f.name], null_string) for f in table.fields],
                )
            logger.debug("Sheet '%s': %d records", sheet.title, len(table.records))

        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
    except (OSError, ValueError) as exc:
        raise ExportError(f"Failed to write workbook {path.name}: {exc}") from exc
    finally:
        workbook.close()

    logger.info("Wrote %d sheets -> %s", len(datasource.tables), path)
    return path


# ---------------------------------------------------------------------------
# pandas
# ---------------------------------------------------------------------------

def table_to_frame(table: Table) -> pd.DataFrame:
    """Convert a Table to a DataFrame with one column per field.

    Numeric and boolean columns use pandas nullable dtypes so ``None``
    survives as ``<NA>``; DATE and TIME columns hold Python objects.
    """
    columns: dict[str, pd.Series] = {}
    for f in table.fields:
        values = [record[f.name] for record in table.records]
        dtype = _PANDAS_DTYPES.get(f.type, "object")
        columns[f.name] = pd.Series(values, dtype=dtype, name=f.name)
    return pd.DataFrame(columns, columns=table.field_names)


def datasource_to_frames(datasource: Datasource) -> dict[str, pd.DataFrame]:
    """Convert every table to a DataFrame, keyed by table name.

    Raises:
        ExportError: If two tables share a name.
    """
    frames: dict[str, pd.DataFrame] = {}
    for table in datasource.tables:
        if table.name in frames:
            raise ExportError(f"Duplicate table name '{table.name}' in datasource")
        frames[table.name] = table_to_frame(table)
    return frames


def _write_dataframe(
    df: pd.DataFrame,
    path: Path,
    output_format: str,
) -> None:
    """Write a single DataFrame to disk in the specified format.

    Raises:
        ExportError: If writing fails for any reason.
    """
    try:
        if output_format == "csv":
            df.to_csv(path, index=False, encoding="utf-8-sig")
        else:  # parquet
            df.to_parquet(path, index=False, engine="pyarrow")
    except Exception as exc:
        raise ExportError(
            f"Failed to write {path.name} as {output_format}: {exc}"
        ) from exc


def export_tables(
    datasource: Datasource,
    output_dir: str | Path,
    output_format: Literal["csv", "parquet"] = "csv",
) -> list[str]:
    """Write every table of *datasource* to ``{table_name}.{format}``.

    The output directory is created recursively if it does not exist.

    Returns:
        List of file paths (as strings) that were written, in table order.

    Raises:
        ExportError: If *output_format* is unsupported, table names
            collide, or any write fails.
    """
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_SUPPORTED_FORMATS)}"
        )

    frames = datasource_to_frames(datasource)
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    written: list[str] = []
    for table_name, df in frames.items():
        file_path = out / f"{table_name}.{output_format}"
        _write_dataframe(df, file_path, output_format)
        written.append(str(file_path))
        logger.info(
            "Exported table '%s' -> %s (%d rows, %d cols)",
            table_name,
            file_path.name,
            len(df),
            len(df.columns),
        )
    return written
