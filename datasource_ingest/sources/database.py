"""
Relational database reader for datasource-ingest.

Each configured table name is one table unit, read with ``SELECT *``
through SQLAlchemy.  Field definitions come from reflected column
metadata: name and label are both the column name, the field type is
mapped from the column's SQL type.

SQL type mapping (by SQLAlchemy type visit name):

    CHAR, NCHAR, VARCHAR, NVARCHAR, TEXT, STRING -> STRING
    BOOLEAN, BIT                                 -> BOOLEAN
    TINYINT, SMALLINT, INTEGER                   -> INTEGER
    BIGINT                                       -> LONG
    FLOAT, REAL                                  -> FLOAT
    DOUBLE, DOUBLE_PRECISION, NUMERIC, DECIMAL   -> DOUBLE
    TIMESTAMP, DATETIME                          -> TIMESTAMP
    DATE                                         -> DATE
    TIME                                         -> TIME

Any other column type aborts the build with ``UndefinedFieldType``.
Values arrive typed from the driver and skip the text coercer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from datasource_ingest.exceptions import SourceUnavailable, UndefinedFieldType
from datasource_ingest.field_types import FieldType
from datasource_ingest.model import Field, Record
from datasource_ingest.normalize.assemble import assemble_native_record
from datasource_ingest.sources.base import DataRow, SourceReader, TableUnit

logger = logging.getLogger(__name__)

_SQL_TYPES: dict[str, FieldType] = {
    "CHAR": FieldType.STRING,
    "NCHAR": FieldType.STRING,
    "VARCHAR": FieldType.STRING,
    "NVARCHAR": FieldType.STRING,
    "TEXT": FieldType.STRING,
    "STRING": FieldType.STRING,
    "UNICODE": FieldType.STRING,
    "UNICODE_TEXT": FieldType.STRING,
    "BOOLEAN": FieldType.BOOLEAN,
    "BIT": FieldType.BOOLEAN,
    "TINYINT": FieldType.INTEGER,
    "SMALLINT": FieldType.INTEGER,
    "SMALL_INTEGER": FieldType.INTEGER,
    "INTEGER": FieldType.INTEGER,
    "BIGINT": FieldType.LONG,
    "BIG_INTEGER": FieldType.LONG,
    "FLOAT": FieldType.FLOAT,
    "REAL": FieldType.FLOAT,
    "DOUBLE": FieldType.DOUBLE,
    "DOUBLE_PRECISION": FieldType.DOUBLE,
    "NUMERIC": FieldType.DOUBLE,
    "DECIMAL": FieldType.DOUBLE,
    "TIMESTAMP": FieldType.TIMESTAMP,
    "DATETIME": FieldType.TIMESTAMP,
    "DATE": FieldType.DATE,
    "TIME": FieldType.TIME,
}


def map_sql_type(sql_type: Any, column: str = "") -> FieldType:
    """Map a SQLAlchemy column type to a ``FieldType``.

    Raises:
        UndefinedFieldType: The SQL type has no mapping.
    """
    visit_name = str(getattr(sql_type, "__visit_name__", "")).upper()
    field_type = _SQL_TYPES.get(visit_name)
    if field_type is None:
        raise UndefinedFieldType(
            f"Undefined SQL type.[type: {sql_type}; column: {column};]",
            type_name=str(sql_type),
        )
    return field_type


class DatabaseReader(SourceReader):
    """Reader for tables of a SQLAlchemy-reachable database."""

    format_name = "database"
    skip_empty_rows = False

    def __init__(self, config: Any) -> None:
        super().__init__(config)
        self._engine: sa.Engine | None = None
        self._connection: sa.Connection | None = None
        self._table: sa.Table | None = None

    def open_source(self) -> None:
        try:
            self._engine = sa.create_engine(self.config.url)
            self._connection = self._engine.connect()
        except SQLAlchemyError as exc:
            self.close()
            raise SourceUnavailable(f"Cannot connect to database: {exc}") from exc
        logger.info("Connected to %s", self._engine.url.render_as_string(hide_password=True))

    def _reflect(self, name: str) -> sa.Table:
        try:
            return sa.Table(
                name,
                sa.MetaData(),
                autoload_with=self._connection,
                schema=self.config.schema_name,
            )
        except NoSuchTableError as exc:
            raise SourceUnavailable(f"Table not found: {name}") from exc
        except SQLAlchemyError as exc:
            raise SourceUnavailable(f"Cannot read table {name}: {exc}") from exc

    def list_table_units(self) -> Iterator[TableUnit]:
        source = self._engine.url.render_as_string(hide_password=True)
        for index, name in enumerate(self.config.tables):
            self._table = self._reflect(name)
            logger.debug("Table '%s': %d columns", name, len(self._table.columns))
            yield TableUnit(source=source, identifier=name, name=name, label=name, index=index)
        self._table = None

    def read_field_defs(self, unit: TableUnit) -> list[Field] | None:
        return [
            Field(name=col.name, type=map_sql_type(col.type, col.name), label=col.name)
            for col in self._table.columns
        ]

    def read_data_rows(self, unit: TableUnit) -> Iterator[DataRow]:
        try:
            with self._connection.execute(sa.select(self._table)) as result:
                for row_number, row in enumerate(result):
                    yield DataRow(row_number=row_number, values=tuple(row))
        except SQLAlchemyError as exc:
            raise SourceUnavailable(f"Cannot query table {unit.name}: {exc}") from exc

    def assemble(self, row: DataRow, fields: Sequence[Field]) -> Record:
        return assemble_native_record(row.row_number, row.values, fields)

    def close(self) -> None:
        self._table = None
        connection, self._connection = self._connection, None
        self.release(connection, "Connection")
        engine, self._engine = self._engine, None
        if engine is not None:
            engine.dispose()
