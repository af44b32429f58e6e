"""
Table name resolution for datasource-ingest.

Sheet names and file names carry both a table name and a human label,
written as ``Name(Label)``::

    "Customers(顧客)"        -> name="Customers",  label="顧客"
    "Customers (顧客)"       -> name="Customers ", label="顧客"
    "Customers(顧客).csv"    -> name="Customers",  label="顧客"   (file form)
    "Customers"              -> name="Customers",  label="Customers"

Whitespace around the name is kept as written.
"""

from __future__ import annotations

import re
from typing import NamedTuple

_TABLE_NAME_PATTERN = re.compile(r"^(.+?)(\((.*?)\).*?)?$")
_FILE_NAME_PATTERN = re.compile(r"^(.+?)(\((.*?)\).*?)?\..*?$")


class TableName(NamedTuple):
    name: str
    label: str


def _resolve(pattern: re.Pattern[str], identifier: str) -> TableName:
    match = pattern.match(identifier)
    if match is None:
        return TableName(identifier, identifier)
    name = match.group(1)
    label = match.group(3)
    if label is None:
        # No parenthesized part: the whole identifier doubles as the label.
        label = identifier if pattern is _TABLE_NAME_PATTERN else name
    return TableName(name, label)


def resolve_table_name(identifier: str) -> TableName:
    """Split a sheet name (or similar identifier) into ``(name, label)``."""
    return _resolve(_TABLE_NAME_PATTERN, identifier)


def resolve_file_table_name(filename: str) -> TableName:
    """Split a file name into ``(name, label)``, dropping the extension.

    Names without an extension fall back to ``resolve_table_name``.
    """
    match = _FILE_NAME_PATTERN.match(filename)
    if match is None:
        return resolve_table_name(filename)
    return _resolve(_FILE_NAME_PATTERN, filename)
