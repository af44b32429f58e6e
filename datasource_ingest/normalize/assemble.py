"""
Field-definition parsing and record assembly for datasource-ingest.

Text-based sources (spreadsheet, XML, CSV) declare their schema in three
parallel header rows: labels, names and type names.
``read_field_definitions`` validates them once per table, before any
data row is read; a bad schema aborts the build.

``assemble_record`` then turns one raw data row into a ``Record`` by
coercing each value to its field's type.  Coercion errors propagate
with the row number attached and abort the build as well.

Database sources skip the text layer: the driver already returns typed
values, so ``assemble_native_record`` only normalizes them to the
Python type of each field.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

from datasource_ingest.exceptions import (
    FieldDefinitionError,
    MalformedValue,
    UndefinedFieldType,
    UnsupportedFieldType,
)
from datasource_ingest.field_types import FieldType, resolve_field_type
from datasource_ingest.model import Field, Record
from datasource_ingest.normalize.coerce import (
    NullPredicate,
    clamp_integer,
    coerce_value,
    is_default_null,
    make_null_predicate,
)
from datasource_ingest.normalize.rows import cell_to_str

logger = logging.getLogger(__name__)

_never_null: NullPredicate = make_null_predicate(None)


@dataclass(frozen=True)
class RawCell:
    """A raw cell value plus whether its native representation is text.

    Spreadsheet readers use this to tell date/number cells (rendered as
    ``yyyy/MM/dd HH:mm:ss`` or a decimal string) apart from string cells.
    """

    value: str | None
    textual: bool = True


# ---------------------------------------------------------------------------
# Field definitions
# ---------------------------------------------------------------------------

def _trim_trailing_blanks(row: Sequence[Any]) -> list[str]:
    values = [cell_to_str(c) for c in row]
    while values and values[-1] == "":
        values.pop()
    return values


def read_field_definitions(
    label_row: Sequence[Any],
    name_row: Sequence[Any],
    type_row: Sequence[Any],
    *,
    trim_trailing: bool = True,
) -> list[Field]:
    """Build ``Field`` descriptors from the three header rows.

    The column count is taken from the name row.  With *trim_trailing*
    (grid layouts) trailing blank name cells are ignored; declared
    layouts such as XML pass False so every declared field is checked.
    Missing label or type cells count as empty.

    Raises:
        FieldDefinitionError: Empty name, empty type text, or a
            duplicated name.
        UndefinedFieldType: The type text resolves to ``UNKNOWN``.
    """
    if trim_trailing:
        names = _trim_trailing_blanks(name_row)
    else:
        names = [cell_to_str(c) for c in name_row]
    labels = [cell_to_str(c) for c in label_row]
    types = [cell_to_str(c) for c in type_row]

    fields: list[Field] = []
    seen: set[str] = set()
    for col, name in enumerate(names):
        label = labels[col] if col < len(labels) else ""
        type_text = types[col] if col < len(types) else ""

        if not name:
            raise FieldDefinitionError(f"Field name is empty.[row: 1; col: {col};]")
        if not type_text:
            raise FieldDefinitionError(f"Field type is empty.[row: 2; col: {col};]")
        if name in seen:
            raise FieldDefinitionError(f"Duplicate field name '{name}'.[row: 1; col: {col};]")

        field_type = resolve_field_type(type_text)
        if field_type is FieldType.UNKNOWN:
            raise UndefinedFieldType(
                f"Undefined type.[type: {type_text}; row: 2; col: {col};]",
                column=col,
                type_name=type_text,
            )

        seen.add(name)
        fields.append(Field(name=name, type=field_type, label=label))

    logger.debug("Read %d field definitions: %s", len(fields), [f.name for f in fields])
    return fields


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def assemble_record(
    row_number: int,
    raw_row: Sequence[Any],
    fields: Sequence[Field],
    is_null: NullPredicate = is_default_null,
) -> Record:
    """Coerce one raw row into a ``Record``, one value per field in order.

    Items of *raw_row* may be plain strings, ``None`` or ``RawCell``.
    Positions past the end of *raw_row* are treated as absent.

    Raises:
        MalformedValue: A value cannot be parsed for its field type.
        UnsupportedFieldType: A field has a type with no coercion rule.
    """
    data: dict[str, Any] = {}
    for col, f in enumerate(fields):
        cell = raw_row[col] if col < len(raw_row) else None
        if isinstance(cell, RawCell):
            raw, textual = cell.value, cell.textual
        else:
            raw, textual = cell, True
        data[f.name] = coerce_value(
            raw, f.type, is_null, textual=textual, row=row_number, column=f.name,
        )
    return Record(data)


def _native(value: Any, field_type: FieldType, row: int, column: str) -> Any:
    if value is None:
        return None
    if field_type is FieldType.STRING:
        return value if isinstance(value, str) else str(value)
    if isinstance(value, str):
        # SQLite can hand back text in a column of any declared type.
        return coerce_value(value, field_type, _never_null, row=row, column=column)
    if field_type is FieldType.BOOLEAN:
        return bool(value)
    if field_type in (FieldType.INTEGER, FieldType.LONG):
        return clamp_integer(value, field_type)
    if field_type in (FieldType.FLOAT, FieldType.DOUBLE):
        return float(value)
    if field_type is FieldType.TIMESTAMP:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time())
    elif field_type is FieldType.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
    elif field_type is FieldType.TIME:
        if isinstance(value, datetime):
            return value.time()
        if isinstance(value, time):
            return value
    else:
        raise UnsupportedFieldType(
            f"Unsupported field type {field_type}.[row: {row}; column: {column};]",
            row=row,
            field_type=field_type,
        )
    raise MalformedValue(
        f"Cannot read {type(value).__name__} value {value!r} as {field_type}."
        f"[row: {row}; column: {column};]",
        row=row,
        column=column,
        field_type=field_type,
        value=str(value),
    )


def assemble_native_record(
    row_number: int,
    values: Sequence[Any],
    fields: Sequence[Field],
) -> Record:
    """Build a ``Record`` from driver-typed values (database sources).

    Numbers are narrowed to ``int`` / ``float`` (``Decimal`` included),
    temporal values are cut down to the field's date/time component.
    """
    data: dict[str, Any] = {}
    for col, f in enumerate(fields):
        value = values[col] if col < len(values) else None
        try:
            data[f.name] = _native(value, f.type, row_number, f.name)
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise MalformedValue(
                f"Cannot read value {value!r} as {f.type}.[row: {row_number}; column: {f.name};]",
                row=row_number,
                column=f.name,
                field_type=f.type,
                value=str(value),
            ) from exc
    return Record(data)
