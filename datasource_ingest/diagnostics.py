"""
Diagnostics sink for datasource-ingest.

Non-fatal events during a build -- a skipped sheet, an empty row, a row
whose value count does not match the schema -- are collected here and
returned to the caller alongside the ``Datasource``.  Every recorded
event is also logged at WARNING level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    INSUFFICIENT_HEADER_ROWS = "insufficient_header_rows"
    EMPTY_ROW = "empty_row"
    FIELD_COUNT_MISMATCH = "field_count_mismatch"


@dataclass(frozen=True)
class Diagnostic:
    """One skipped unit or row.

    Attributes:
        kind: What was skipped and why.
        source: The file (or database URL) being read.
        table: Table name, if it was already resolved.
        row: Source row number, for row-level events.
        message: Human-readable description.
    """

    kind: DiagnosticKind
    source: str
    table: str | None = None
    row: int | None = None
    message: str = ""


@dataclass
class Diagnostics:
    """Ordered collection of ``Diagnostic`` entries for one build."""

    entries: list[Diagnostic] = field(default_factory=list)

    def report(
        self,
        kind: DiagnosticKind,
        source: str,
        message: str,
        *,
        table: str | None = None,
        row: int | None = None,
    ) -> Diagnostic:
        entry = Diagnostic(kind=kind, source=source, table=table, row=row, message=message)
        self.entries.append(entry)
        logger.warning("%s [source: %s; table: %s; row: %s]", message, source, table, row)
        return entry

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [e for e in self.entries if e.kind is kind]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
