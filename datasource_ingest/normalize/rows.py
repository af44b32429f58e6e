"""
Row validation for datasource-ingest.

Decides whether a raw data row should be skipped before it reaches the
record assembler:

- **Empty rows**: every cell stringifies to ``""``.
- **Field-count mismatches**: the row carries a different number of
  values than the table declares fields.

Both are skip-worthy, never fatal.  The caller reports them through
``diagnostics.Diagnostics``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def cell_to_str(value: Any) -> str:
    """Display-string rule for an already-extracted raw value.

    ``None`` becomes ``""``; objects exposing a ``value`` attribute
    (``RawCell``) are unwrapped; everything else goes through ``str``.
    """
    if value is None:
        return ""
    inner = getattr(value, "value", value)
    if inner is None:
        return ""
    return inner if isinstance(inner, str) else str(inner)


def is_empty_row(raw_row: Sequence[Any]) -> bool:
    """True iff every cell in *raw_row* has a zero-length display string."""
    return all(len(cell_to_str(cell)) == 0 for cell in raw_row)


def matches_field_count(raw_row: Sequence[Any], field_count: int) -> bool:
    """True iff *raw_row* carries exactly *field_count* values."""
    return len(raw_row) == field_count
