"""
Value coercion for datasource-ingest.

Converts a raw textual cell value into a typed Python value according
to the field's declared ``FieldType``.  This is shared by every source
format that yields text (spreadsheet, XML, CSV).

Policy, in order:

1. ``None`` or the null sentinel (default ``"(NULL)"``) -> ``None`` for
   every type.  Nothing else is attempted.
2. Empty string -> ``None`` for every type except STRING, which keeps
   the raw text unchanged (no trimming).
3. Per-type parsing.  Numeric and temporal values that fail to parse
   raise ``MalformedValue``; they never silently become ``None`` or 0.

Integers are parsed as floats first and then truncated toward zero,
because spreadsheet numeric cells render integers as ``"2.0"``.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime
from typing import Any

from datasource_ingest.exceptions import MalformedValue, UnsupportedFieldType
from datasource_ingest.field_types import FieldType

DEFAULT_NULL_STRING = "(NULL)"

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"
DATE_FORMAT = "%Y/%m/%d"
TIME_FORMAT = "%H:%M:%S"

_INT_BOUNDS = {
    FieldType.INTEGER: (-(2**31), 2**31 - 1),
    FieldType.LONG: (-(2**63), 2**63 - 1),
}

NullPredicate = Callable[[str], bool]


def make_null_predicate(null_string: str | None = DEFAULT_NULL_STRING) -> NullPredicate:
    """Build the null-sentinel predicate for a configured null string.

    Passing ``None`` disables the sentinel: only absent values are null.
    """
    if null_string is None:
        return lambda value: False
    return lambda value: value == null_string


is_default_null: NullPredicate = make_null_predicate()


def clamp_integer(number: Any, field_type: FieldType) -> int:
    """Truncate *number* toward zero and clamp it to the range of *field_type*.

    INTEGER is signed 32-bit, LONG signed 64-bit.  Infinities clamp to
    the nearest bound; NaN raises ``ValueError``.
    """
    low, high = _INT_BOUNDS[field_type]
    if isinstance(number, float):
        if math.isnan(number):
            raise ValueError(f"NaN is not an integer: {number!r}")
        if math.isinf(number):
            return high if number > 0 else low
    return max(low, min(high, int(number)))


def coerce_value(
    raw: str | None,
    field_type: FieldType,
    is_null: NullPredicate = is_default_null,
    *,
    textual: bool = True,
    row: int | None = None,
    column: str | None = None,
) -> Any:
    """Coerce one raw value to the Python type of *field_type*.

    Args:
        raw: The raw cell text, or ``None`` if the cell is absent.
        field_type: The declared type of the field.
        is_null: Null-sentinel predicate (see ``make_null_predicate``).
        textual: ``True`` when the cell's native representation is text.
            Spreadsheet date/number cells pass ``False``; this selects
            the full timestamp pattern for DATE and TIME fields.
        row: Source row number, attached to errors.
        column: Field name, attached to errors.

    Returns:
        ``str``, ``bool``, ``int``, ``float``, ``datetime``, ``date``,
        ``time`` or ``None``.

    Raises:
        MalformedValue: If a numeric or temporal value cannot be parsed.
        UnsupportedFieldType: If *field_type* has no coercion rule.
    """
    if raw is None or is_null(raw):
        return None

    if field_type is FieldType.STRING:
        return raw

    if field_type not in _PARSERS:
        raise UnsupportedFieldType(
            f"Unsupported field type {field_type}.[row: {row}; column: {column};]",
            row=row,
            field_type=field_type,
        )

    if raw == "":
        return None

    parser = _PARSERS[field_type]
    try:
        return parser(raw, field_type, textual)
    except (ValueError, OverflowError) as exc:
        raise MalformedValue(
            f"Cannot parse '{raw}' as {field_type}.[row: {row}; column: {column};]",
            row=row,
            column=column,
            field_type=field_type,
            value=raw,
        ) from exc


# ---------------------------------------------------------------------------
# Per-type parsers
# ---------------------------------------------------------------------------

def _parse_boolean(raw: str, field_type: FieldType, textual: bool) -> bool:
    return raw.lower() == "true"


def _parse_integer(raw: str, field_type: FieldType, textual: bool) -> int:
    return clamp_integer(float(raw), field_type)


def _parse_float(raw: str, field_type: FieldType, textual: bool) -> float:
    return float(raw)


def _parse_timestamp(raw: str, field_type: FieldType, textual: bool) -> datetime:
    return datetime.strptime(raw, TIMESTAMP_FORMAT)


def _parse_date(raw: str, field_type: FieldType, textual: bool):
    fmt = DATE_FORMAT if textual else TIMESTAMP_FORMAT
    return datetime.strptime(raw, fmt).date()


def _parse_time(raw: str, field_type: FieldType, textual: bool):
    fmt = TIME_FORMAT if textual else TIMESTAMP_FORMAT
    return datetime.strptime(raw, fmt).time()


_PARSERS: dict[FieldType, Callable[[str, FieldType, bool], Any]] = {
    FieldType.BOOLEAN: _parse_boolean,
    FieldType.INTEGER: _parse_integer,
    FieldType.LONG: _parse_integer,
    FieldType.FLOAT: _parse_float,
    FieldType.DOUBLE: _parse_float,
    FieldType.TIMESTAMP: _parse_timestamp,
    FieldType.DATE: _parse_date,
    FieldType.TIME: _parse_time,
}
