"""
Datasource build orchestration for datasource-ingest.

``build()`` runs one reader over its source and assembles the result:

  1. Select the reader class from the config's ``format`` (registry).
  2. Open the source (context manager; released on every exit path).
  3. For each table unit:
     a. Read the field definitions.  A unit with too few header rows is
        skipped with an INSUFFICIENT_HEADER_ROWS diagnostic; its
        siblings are still read.
     b. For each data row: skip empty rows (EMPTY_ROW) and rows whose
        value count does not fit the schema (FIELD_COUNT_MISMATCH),
        assemble the rest into records.
  4. Wrap the tables in a ``Datasource`` named after the config.

Schema and value errors (``FieldDefinitionError``, ``UndefinedFieldType``,
``MalformedValue``, ``UnsupportedFieldType``) and ``SourceUnavailable``
propagate and abort the build; no partial Datasource is returned.
"""

from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass, field

from datasource_ingest.config import BuildConfig
from datasource_ingest.diagnostics import DiagnosticKind, Diagnostics
from datasource_ingest.model import Datasource, Field, Record, Table
from datasource_ingest.normalize.rows import is_empty_row
from datasource_ingest.registry import get_reader_class
from datasource_ingest.sources.base import HEADER_ROWS, SourceReader, TableUnit

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Output of one ``build()`` call.

    Attributes:
        datasource: The assembled Datasource.
        diagnostics: Skipped units and rows, in encounter order.
    """

    datasource: Datasource
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def _read_records(
    reader: SourceReader,
    unit: TableUnit,
    fields: list[Field],
    diagnostics: Diagnostics,
) -> list[Record]:
    records: list[Record] = []
    # Close the row iterator on abort too, so readers release cursors.
    with closing(reader.read_data_rows(unit)) as rows:
        for row in rows:
            if reader.skip_empty_rows and is_empty_row(row.values):
                diagnostics.report(
                    DiagnosticKind.EMPTY_ROW,
                    unit.source,
                    "Skip row (empty).",
                    table=unit.name,
                    row=row.row_number,
                )
                continue
            if not reader.fits(row, fields):
                diagnostics.report(
                    DiagnosticKind.FIELD_COUNT_MISMATCH,
                    unit.source,
                    f"Skip row (field count mismatch: {len(row.values)} values, "
                    f"{len(fields)} fields).",
                    table=unit.name,
                    row=row.row_number,
                )
                continue
            records.append(reader.assemble(row, fields))
    return records


def build(config: BuildConfig, diagnostics: Diagnostics | None = None) -> BuildResult:
    """Build a Datasource from the source described by *config*.

    Args:
        config: Validated build configuration.
        diagnostics: Optional sink to append to; a fresh one is created
            otherwise.

    Returns:
        BuildResult with the Datasource and the collected diagnostics.

    Raises:
        SourceUnavailable: The source cannot be opened or read.
        FieldDefinitionError, UndefinedFieldType: Bad table schema.
        MalformedValue, UnsupportedFieldType: A value cannot be coerced.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    reader_class = get_reader_class(config.source.format)
    tables: list[Table] = []

    with reader_class(config.source) as reader:
        for unit in reader.list_table_units():
            fields = reader.read_field_defs(unit)
            if fields is None:
                diagnostics.report(
                    DiagnosticKind.INSUFFICIENT_HEADER_ROWS,
                    unit.source,
                    f"Skip table '{unit.identifier}' (fewer than {HEADER_ROWS} header rows).",
                    table=unit.name,
                )
                continue

            records = _read_records(reader, unit, fields, diagnostics)
            table = Table(name=unit.name, label=unit.label, fields=fields, records=records)
            logger.info(
                "Built table '%s': %d fields, %d records", table.name, len(fields), len(records)
            )
            tables.append(table)

    datasource = Datasource(name=config.datasource_name, tables=tables)
    logger.info(
        "Built datasource '%s': %d tables, %d diagnostics",
        datasource.name,
        len(tables),
        len(diagnostics),
    )
    return BuildResult(datasource=datasource, diagnostics=diagnostics)
