"""
Shared test fixtures and sample data for datasource-ingest tests.

Source files are generated at runtime under ``tmp_path`` (openpyxl
workbooks, CSV/XML text, SQLite databases through SQLAlchemy), so the
suite needs no checked-in input files.  Sample layouts are defined here
as module-level constants for easy discovery and modification.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from openpyxl import Workbook

# ---------------------------------------------------------------------------
# Sample layouts -- label row, name row, type row, then data rows
# ---------------------------------------------------------------------------
USERS_ROWS = [
    ["User ID", "Name", "Age", "Active"],
    ["id", "name", "age", "active"],
    ["INTEGER", "STRING", "INTEGER", "BOOLEAN"],
    ["1", "Alice", "30", "true"],
    ["2", "Bob", "(NULL)", "false"],
]

ALICE_BOB_ROWS = [
    ["Name", "Age"],
    ["Name", "Age"],
    ["STRING", "INTEGER"],
    ["Alice", "30"],
    ["(NULL)", "(NULL)"],
    ["Bob", "x"],
]

USERS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<datasource>
  <tables>
    <table name="users" label="Users">
      <fields>
        <field name="id" label="User ID" type="INTEGER"/>
        <field name="name" label="Name" type="STRING"/>
        <field name="joined" label="Joined" type="DATE"/>
      </fields>
      <records>
        <record><data value="1"/><data value="Alice"/><data value="2024/01/15"/></record>
        <record><data value="2"/><data value="Bob"/><data value="(NULL)"/></record>
      </records>
    </table>
  </tables>
</datasource>
"""


# ---------------------------------------------------------------------------
# Source file factories
# ---------------------------------------------------------------------------
@pytest.fixture
def write_workbook(tmp_path):
    """Factory: ``write_workbook(filename, {sheet_title: rows}) -> Path``."""

    def _write(filename: str, sheets: dict[str, list[list[object]]]) -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title=title)
            for row in rows:
                ws.append(list(row))
        path = tmp_path / filename
        wb.save(path)
        return path

    return _write


@pytest.fixture
def write_text(tmp_path):
    """Factory: ``write_text(filename, text, encoding="utf-8") -> Path``."""

    def _write(filename: str, text: str, encoding: str = "utf-8") -> Path:
        path = tmp_path / filename
        path.write_text(text, encoding=encoding)
        return path

    return _write


@pytest.fixture
def write_csv(write_text):
    """Factory: ``write_csv(filename, rows, encoding="utf-8") -> Path``.

    Rows are joined with commas verbatim, so tests control the exact
    number of values on every line.
    """

    def _write(filename: str, rows: list[list[str]], encoding: str = "utf-8") -> Path:
        text = "".join(",".join(row) + "\n" for row in rows)
        return write_text(filename, text, encoding=encoding)

    return _write


@pytest.fixture
def sqlite_url(tmp_path):
    """Factory: ``sqlite_url(*statements) -> str`` for a fresh SQLite file."""

    def _create(*statements: str) -> str:
        url = f"sqlite:///{tmp_path / 'test.db'}"
        engine = sa.create_engine(url)
        with engine.begin() as conn:
            for statement in statements:
                conn.exec_driver_sql(statement)
        engine.dispose()
        return url

    return _create


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (writes and rebuilds files)",
    )
