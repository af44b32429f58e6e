"""
Custom exception hierarchy for datasource-ingest.

Fatal errors abort the whole ``build()`` call; no partial ``Datasource``
is ever returned.  Row-level problems that only skip a row or a table
unit (empty rows, field-count mismatches, too few header rows) are not
exceptions -- they are reported through ``diagnostics.Diagnostics``.
"""

from __future__ import annotations


class DatasourceIngestError(Exception):
    """Base exception for all datasource-ingest errors."""


class FieldDefinitionError(DatasourceIngestError):
    """Raised when a field-definition row has an empty name or type.

    Also raised for duplicate field names within one table.
    """


class UndefinedFieldType(DatasourceIngestError):
    """Raised when a type name (or vendor SQL type) has no mapping.

    Attributes:
        column: Zero-based column index of the offending field.
        type_name: The raw type text that failed to resolve.
    """

    def __init__(self, message: str, column: int | None = None, type_name: str | None = None) -> None:
        super().__init__(message)
        self.column = column
        self.type_name = type_name


class MalformedValue(DatasourceIngestError):
    """Raised when a data cell cannot be parsed for its declared type.

    Carries the row/column context so the caller can locate the cell.
    """

    def __init__(
        self,
        message: str,
        row: int | None = None,
        column: str | None = None,
        field_type: object = None,
        value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.row = row
        self.column = column
        self.field_type = field_type
        self.value = value


class UnsupportedFieldType(DatasourceIngestError):
    """Raised when a value is coerced to a type the coercer cannot produce.

    ``UNKNOWN``, ``NULL`` and ``NUMERIC`` fall in this category.
    """

    def __init__(self, message: str, row: int | None = None, field_type: object = None) -> None:
        super().__init__(message)
        self.row = row
        self.field_type = field_type


class SourceUnavailable(DatasourceIngestError):
    """Raised when a source cannot be opened or read.

    For example a missing file, a broken workbook, malformed XML, or a
    failed database connection.  The original error is chained as
    ``__cause__``.
    """


class ConfigValidationError(DatasourceIngestError):
    """Raised when a build configuration fails validation.

    This can happen if:
    - The YAML file is empty.
    - Input files with mixed or unknown suffixes are given to
      ``config_for_files()``.
    """


class ExportError(DatasourceIngestError):
    """Raised when the exporter fails to write output files.

    For example, permission errors, disk full, or unsupported format.
    """
