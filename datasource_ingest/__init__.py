"""
datasource-ingest: read tabular sources into one Datasource model.

Spreadsheet workbooks, XML documents, CSV files and relational database
tables are normalized into ``Datasource -> Table -> Field / Record``.

Public API surface:

- ``open(path, ...)`` -- **recommended entry point**. Polymorphic: accepts
  a ``.yaml`` build config, a source file, or a list of source files,
  and returns a ``BuildResult``.

- ``build(config)`` -- run one build from a ``BuildConfig``.

- ``write_spreadsheet(datasource, path)`` / ``export_tables(...)`` --
  write a Datasource back out as a workbook, or as CSV/Parquet files.

- ``sort_records(table, *columns)`` -- sorted copy of a table.
"""

from __future__ import annotations

import logging
from pathlib import Path

from datasource_ingest.builder import BuildResult, build
from datasource_ingest.config import (
    BuildConfig,
    config_for_files,
    load_config,
    save_config,
)
from datasource_ingest.diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from datasource_ingest.exceptions import ConfigValidationError, DatasourceIngestError
from datasource_ingest.export import (
    datasource_to_frames,
    export_tables,
    table_to_frame,
    write_spreadsheet,
)
from datasource_ingest.field_types import FieldType, resolve_field_type
from datasource_ingest.model import Datasource, Field, Record, Table
from datasource_ingest.sorting import sort_records

__all__ = [
    "open",
    "build",
    "BuildResult",
    "BuildConfig",
    "config_for_files",
    "load_config",
    "save_config",
    "Datasource",
    "Table",
    "Field",
    "Record",
    "FieldType",
    "resolve_field_type",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "DatasourceIngestError",
    "write_spreadsheet",
    "export_tables",
    "table_to_frame",
    "datasource_to_frames",
    "sort_records",
]

logger = logging.getLogger(__name__)


def open(
    path: str | Path | list[str | Path],
    name: str | None = None,
    **source_options: object,
) -> BuildResult:
    """Single entry point: build from a config file or from source files.

    Polymorphic behaviour based on *path*:

    - **YAML file** (``.yaml`` / ``.yml``): loads the build config and
      runs it.  *name* and *source_options* must not be given.
    - **Source file or list of files**: the format is inferred from the
      file suffixes (``.xlsx``, ``.csv``, ``.xml``); *source_options*
      go to the source block (e.g. ``charset="shift_jis"``).

    Examples::

        result = datasource_ingest.open("inputs/master.xlsx")
        users = result.datasource.get_table("users")

        result = datasource_ingest.open(
            ["inputs/users(Users).csv", "inputs/depts(Departments).csv"],
            name="master",
            charset="cp932",
        )

        result = datasource_ingest.open("configs/master.yaml")

    Raises:
        ConfigValidationError: Unsupported or mixed file suffixes, or
            options passed together with a YAML config.
        DatasourceIngestError: Any fatal build error.
    """
    paths = list(path) if isinstance(path, (list, tuple)) else [path]

    if len(paths) == 1 and Path(paths[0]).suffix.lower() in (".yaml", ".yml"):
        if name is not None or source_options:
            raise ConfigValidationError(
                "name/source options cannot be combined with a YAML config; "
                "set them in the config file instead."
            )
        logger.info("open() -- loading config from %s", paths[0])
        config = load_config(paths[0])
    else:
        logger.info("open() -- %d source file(s)", len(paths))
        config = config_for_files(paths, name=name, **source_options)

    return build(config)
