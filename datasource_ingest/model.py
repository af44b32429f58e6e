"""
In-memory data model for datasource-ingest.

One concrete model shared by every source format:

- ``Field``: typed column descriptor (label, name, type).
- ``Record``: read-only mapping of field name -> typed value.
- ``Table``: named, labeled collection of fields and records.
- ``Datasource``: top-level container produced by one build.

All objects are immutable once constructed.  A Datasource owns its
Tables; a Table owns its Fields and Records; there are no
back-references.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from datasource_ingest.field_types import FieldType


@dataclass(frozen=True)
class Field:
    """Typed column descriptor.

    Attributes:
        name: Unique key used to address values in a record.
        type: Declared ``FieldType``.  Never ``UNKNOWN``.
        label: Human-readable display name; may be empty.
    """

    name: str
    type: FieldType
    label: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Field name must not be empty")
        if self.type is FieldType.UNKNOWN:
            raise ValueError(f"Field '{self.name}' has UNKNOWN type")


class Record(Mapping[str, Any]):
    """One row of typed values keyed by field name.

    ``None`` is a valid value for any field.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = MappingProxyType(dict(data))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._data) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._data.items(), key=lambda kv: kv[0])))

    def __repr__(self) -> str:
        return f"Record({dict(self._data)!r})"


@dataclass(frozen=True)
class Table:
    """Schema plus rows for one logical source unit.

    Attributes:
        name: Table name, derived from the source identifier.
        label: Human label, derived from the source identifier.
        fields: Fields in column (definition) order.
        records: Records in source order, after row filtering.
    """

    name: str
    label: str = ""
    fields: tuple[Field, ...] = ()
    records: tuple[Record, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "records", tuple(self.records))

        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate field names in table '{self.name}': {names}")

        expected = set(names)
        for index, record in enumerate(self.records):
            if set(record.keys()) != expected:
                raise ValueError(
                    f"Record {index} of table '{self.name}' has keys "
                    f"{sorted(record.keys())}, expected {sorted(expected)}"
                )

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Field:
        """Look up a field by name.

        Raises:
            KeyError: If the table has no such field.
        """
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class Datasource:
    """Top-level container of tables produced by one build."""

    name: str | None = None
    tables: tuple[Table, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", tuple(self.tables))

    @property
    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Table:
        """Return the first table with *name*.

        Table names are not required to be unique across a multi-file
        build; the first match in processing order wins.

        Raises:
            KeyError: If no table has that name.
        """
        for t in self.tables:
            if t.name == name:
                return t
        raise KeyError(name)
