"""
Configuration models and YAML I/O for datasource-ingest.

A build is described by one ``BuildConfig``: an optional datasource name
plus exactly one source block.  The source block's ``format`` field
selects the reader variant:

- ``xlsx``: SpreadsheetSourceConfig -- workbook files, one table per sheet.
- ``csv``: DelimitedSourceConfig -- one table per file, charset configurable.
- ``xml``: XmlSourceConfig -- documents with ``datasource/tables/table``.
- ``database``: DatabaseSourceConfig -- SQLAlchemy URL plus table names.

Key functions:
- load_config(path) -> BuildConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- config_for_files(paths, ...) -> BuildConfig: Infer the format from suffixes.

The config is built once and passed to ``build()``; nothing mutates it
during a build.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from datasource_ingest.exceptions import ConfigValidationError
from datasource_ingest.normalize.coerce import DEFAULT_NULL_STRING

logger = logging.getLogger(__name__)

# File suffix -> source format, used by config_for_files()
_SUFFIX_FORMATS = {
    ".xlsx": "xlsx",
    ".xlsm": "xlsx",
    ".csv": "csv",
    ".xml": "xml",
}


class _FileSourceConfig(BaseModel):
    """Fields shared by the file-based sources."""

    model_config = ConfigDict(frozen=True)

    files: list[str] = Field(..., description="Input files, processed in order")
    null_string: str | None = Field(
        DEFAULT_NULL_STRING,
        description="Literal that reads as null for any field type; null disables it",
    )

    @field_validator("files")
    @classmethod
    def _check_files_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one input file is required.")
        return value


class SpreadsheetSourceConfig(_FileSourceConfig):
    """Excel workbooks: every sheet is a table unit."""

    format: Literal["xlsx"] = "xlsx"


class DelimitedSourceConfig(_FileSourceConfig):
    """Delimited text files: every file is a table unit."""

    format: Literal["csv"] = "csv"
    charset: str = Field("utf-8-sig", description="Text encoding of the input files")
    delimiter: str = Field(",", min_length=1, max_length=1)


class XmlSourceConfig(_FileSourceConfig):
    """XML documents: every ``table`` element is a table unit."""

    format: Literal["xml"] = "xml"


class DatabaseSourceConfig(BaseModel):
    """Relational database: every listed table is a table unit."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format: Literal["database"] = "database"
    url: str = Field(..., description="SQLAlchemy database URL")
    tables: list[str] = Field(..., description="Tables to read with SELECT *")
    schema_name: str | None = Field(None, alias="schema", description="Optional schema")

    @field_validator("tables")
    @classmethod
    def _check_tables_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one table name is required.")
        return value


SourceConfig = Annotated[
    Union[SpreadsheetSourceConfig, DelimitedSourceConfig, XmlSourceConfig, DatabaseSourceConfig],
    Field(discriminator="format"),
]


class BuildConfig(BaseModel):
    """Top-level configuration for one ``build()`` call.

    Maps 1:1 to the YAML config file.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(None, description="Datasource name")
    source: SourceConfig

    @property
    def datasource_name(self) -> str | None:
        """Configured name, or the file name for a single-file source."""
        if self.name is not None:
            return self.name
        files = getattr(self.source, "files", None)
        if files and len(files) == 1:
            return Path(files[0]).name
        return None


def load_config(path: str | Path) -> BuildConfig:
    """Load and validate a YAML build config.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return BuildConfig.model_validate(raw)


def save_config(config: BuildConfig, path: str | Path) -> None:
    """Serialize a BuildConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", by_alias=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# datasource-ingest build configuration\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)


def config_for_files(
    paths: list[str | Path],
    name: str | None = None,
    **source_options: object,
) -> BuildConfig:
    """Build a BuildConfig for input files, inferring the format.

    All files must share one supported suffix (``.xlsx``/``.xlsm``,
    ``.csv``, ``.xml``).  Extra keyword arguments go to the source block
    (e.g. ``charset="shift_jis"`` or ``null_string="NULL"``).

    Raises:
        ConfigValidationError: No files, unknown suffix, or mixed formats.
    """
    if not paths:
        raise ConfigValidationError("No input files given.")

    formats = set()
    for p in paths:
        suffix = Path(p).suffix.lower()
        if suffix not in _SUFFIX_FORMATS:
            raise ConfigValidationError(
                f"Unsupported input file '{p}'. "
                f"Supported suffixes: {sorted(_SUFFIX_FORMATS)}"
            )
        formats.add(_SUFFIX_FORMATS[suffix])
    if len(formats) > 1:
        raise ConfigValidationError(
            f"Input files mix formats {sorted(formats)}; build them separately."
        )

    source = {"format": formats.pop(), "files": [str(p) for p in paths], **source_options}
    return BuildConfig.model_validate({"name": name, "source": source})
