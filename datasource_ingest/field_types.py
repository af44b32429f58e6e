"""
Field type registry for datasource-ingest.

Enumerates the scalar types a field can declare and resolves a type
name (as written in a header row or XML ``type`` attribute) to a
``FieldType``.  Lookup is case-insensitive and tolerant of surrounding
whitespace; two vendor synonyms are accepted (``VARCHAR2``, ``NUMBER``).
"""

from __future__ import annotations

from enum import Enum


class FieldType(Enum):
    """Supported field types, each with a stable code and canonical name."""

    NULL = (0, "NULL")
    STRING = (1, "STRING")
    BOOLEAN = (2, "BOOLEAN")
    INTEGER = (10, "INTEGER")
    LONG = (11, "LONG")
    FLOAT = (12, "FLOAT")
    DOUBLE = (13, "DOUBLE")
    NUMERIC = (14, "NUMERIC")
    TIMESTAMP = (20, "TIMESTAMP")
    DATE = (21, "DATE")
    TIME = (22, "TIME")
    UNKNOWN = (-1, "UNKNOWN")

    def __init__(self, code: int, type_name: str) -> None:
        self.code = code
        self.type_name = type_name

    def __str__(self) -> str:
        return self.type_name

    @classmethod
    def from_code(cls, code: int) -> FieldType:
        """Resolve a stable integer code; ``UNKNOWN`` if nothing matches."""
        for member in cls:
            if member.code == code:
                return member
        return cls.UNKNOWN


_BY_NAME: dict[str, FieldType] = {ft.type_name: ft for ft in FieldType}

_SYNONYMS: dict[str, FieldType] = {
    "VARCHAR2": FieldType.STRING,
    "NUMBER": FieldType.NUMERIC,
}


def resolve_field_type(name: str | None) -> FieldType:
    """Resolve a type name (or synonym) to a ``FieldType``.

    The name is trimmed and upper-cased first.  Exact canonical names
    win over synonyms.  Anything else -- including ``None`` -- resolves
    to ``FieldType.UNKNOWN``.
    """
    if name is None:
        return FieldType.UNKNOWN
    key = name.strip().upper()
    if key in _BY_NAME:
        return _BY_NAME[key]
    return _SYNONYMS.get(key, FieldType.UNKNOWN)
