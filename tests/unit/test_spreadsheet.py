"""
Unit tests for the spreadsheet reader (datasource_ingest.sources.spreadsheet).

Workbooks are generated with openpyxl under ``tmp_path``.
"""

from datetime import date, datetime, time

import pytest
from openpyxl import Workbook

from datasource_ingest.builder import build
from datasource_ingest.config import config_for_files
from datasource_ingest.diagnostics import DiagnosticKind
from datasource_ingest.exceptions import (
    FieldDefinitionError,
    MalformedValue,
    SourceUnavailable,
    UndefinedFieldType,
)
from datasource_ingest.field_types import FieldType
from datasource_ingest.normalize.assemble import RawCell
from datasource_ingest.sources.spreadsheet import SpreadsheetReader, cell_to_text
from tests.conftest import ALICE_BOB_ROWS, USERS_ROWS

_HEADER = [
    ["ID", "Name", "Score", "Active", "Joined", "Start"],
    ["id", "name", "score", "active", "joined", "start"],
    ["INTEGER", "STRING", "DOUBLE", "BOOLEAN", "DATE", "TIME"],
]


def _build(path, **options):
    return build(config_for_files([path], **options))


# ---------------------------------------------------------------------------
# Cell stringification
# ---------------------------------------------------------------------------

class TestCellToText:
    """The fixed display-string rule for openpyxl cells."""

    @pytest.fixture
    def sheet(self):
        return Workbook().active

    def test_blank(self, sheet):
        assert cell_to_text(sheet["A1"]) == RawCell("", textual=False)

    def test_missing_cell(self):
        assert cell_to_text(None) == RawCell("", textual=False)

    def test_string_is_textual(self, sheet):
        sheet["A1"] = "Alice"
        assert cell_to_text(sheet["A1"]) == RawCell("Alice", textual=True)

    def test_integer_renders_as_decimal(self, sheet):
        sheet["A1"] = 2
        assert cell_to_text(sheet["A1"]) == RawCell("2.0", textual=False)

    def test_float(self, sheet):
        sheet["A1"] = 1.5
        assert cell_to_text(sheet["A1"]).value == "1.5"

    def test_boolean(self, sheet):
        sheet["A1"] = True
        sheet["A2"] = False
        assert cell_to_text(sheet["A1"]).value == "true"
        assert cell_to_text(sheet["A2"]).value == "false"

    def test_formula_text_without_equals(self, sheet):
        sheet["A1"] = "=SUM(B1:B3)"
        assert cell_to_text(sheet["A1"]) == RawCell("SUM(B1:B3)", textual=False)

    def test_datetime(self, sheet):
        sheet["A1"] = datetime(2024, 1, 2, 3, 4, 5)
        assert cell_to_text(sheet["A1"]) == RawCell("2024/01/02 03:04:05", textual=False)

    def test_date(self, sheet):
        sheet["A1"] = date(2024, 1, 2)
        assert cell_to_text(sheet["A1"]).value == "2024/01/02 00:00:00"

    def test_time_sits_on_day_zero(self, sheet):
        sheet["A1"] = time(10, 30)
        assert cell_to_text(sheet["A1"]).value == "1899/12/31 10:30:00"

    def test_error_cell(self, sheet):
        sheet["A1"] = "#N/A"
        assert cell_to_text(sheet["A1"]).value == ""


# ---------------------------------------------------------------------------
# Reading workbooks
# ---------------------------------------------------------------------------

class TestSpreadsheetRead:
    def test_text_cells(self, write_workbook):
        path = write_workbook("book.xlsx", {"users(Users)": USERS_ROWS})
        result = _build(path)

        assert result.datasource.name == "book.xlsx"
        table = result.datasource.get_table("users")
        assert table.label == "Users"
        assert [f.type for f in table.fields] == [
            FieldType.INTEGER, FieldType.STRING, FieldType.INTEGER, FieldType.BOOLEAN,
        ]
        assert [f.label for f in table.fields] == ["User ID", "Name", "Age", "Active"]
        assert list(table.records) == [
            {"id": 1, "name": "Alice", "age": 30, "active": True},
            {"id": 2, "name": "Bob", "age": None, "active": False},
        ]
        assert len(result.diagnostics) == 0

    def test_native_cells(self, write_workbook):
        path = write_workbook("book.xlsx", {"scores": _HEADER + [
            [1, "Alice", 9.5, True, datetime(2024, 1, 15), time(9, 0)],
            [2.0, "Bob", 7, False, "2024/02/01", "18:30:00"],
        ]})
        table = _build(path).datasource.get_table("scores")

        assert table.label == "scores"
        assert list(table.records) == [
            {"id": 1, "name": "Alice", "score": 9.5, "active": True,
             "joined": date(2024, 1, 15), "start": time(9, 0)},
            {"id": 2, "name": "Bob", "score": 7.0, "active": False,
             "joined": date(2024, 2, 1), "start": time(18, 30)},
        ]

    def test_formula_read_as_text(self, write_workbook):
        path = write_workbook("book.xlsx", {"calc": [
            ["Expr"], ["expr"], ["STRING"], ["=1+2"],
        ]})
        table = _build(path).datasource.get_table("calc")
        assert table.records[0]["expr"] == "1+2"

    def test_short_row_padded(self, write_workbook):
        path = write_workbook("book.xlsx", {"users": USERS_ROWS + [["3", "Carol"]]})
        result = _build(path)
        assert result.datasource.get_table("users").records[-1] == {
            "id": 3, "name": "Carol", "age": None, "active": None,
        }
        assert len(result.diagnostics) == 0

    def test_extra_cell_skipped(self, write_workbook):
        path = write_workbook("book.xlsx", {"users": USERS_ROWS + [["4", "Dan", "1", "true", "x"]]})
        result = _build(path)
        assert len(result.datasource.get_table("users")) == 2
        [diag] = result.diagnostics.of_kind(DiagnosticKind.FIELD_COUNT_MISMATCH)
        assert diag.row == 5
        assert diag.table == "users"

    def test_empty_row_skipped(self, write_workbook):
        rows = USERS_ROWS[:4] + [[None, None, None, None]] + USERS_ROWS[4:]
        result = _build(write_workbook("book.xlsx", {"users": rows}))
        assert [r["id"] for r in result.datasource.get_table("users").records] == [1, 2]
        [diag] = result.diagnostics.of_kind(DiagnosticKind.EMPTY_ROW)
        assert diag.row == 4

    def test_short_sheet_skipped_siblings_kept(self, write_workbook):
        path = write_workbook("book.xlsx", {
            "notes": [["just a note"], ["second line"]],
            "users": USERS_ROWS,
            "empty": [],
        })
        result = _build(path)
        assert result.datasource.table_names == ["users"]
        skipped = result.diagnostics.of_kind(DiagnosticKind.INSUFFICIENT_HEADER_ROWS)
        assert [d.table for d in skipped] == ["notes", "empty"]

    def test_header_only_sheet(self, write_workbook):
        path = write_workbook("book.xlsx", {"users": USERS_ROWS[:3]})
        table = _build(path).datasource.get_table("users")
        assert len(table.fields) == 4
        assert len(table) == 0

    def test_multiple_workbooks(self, write_workbook):
        first = write_workbook("a.xlsx", {"users": USERS_ROWS})
        second = write_workbook("b.xlsx", {"people": ALICE_BOB_ROWS[:5]})
        result = build(config_for_files([first, second], name="both"))
        assert result.datasource.name == "both"
        assert result.datasource.table_names == ["users", "people"]

    def test_custom_null_string(self, write_workbook):
        rows = USERS_ROWS[:3] + [["1", "NULL", "NULL", "NULL"]]
        result = _build(write_workbook("book.xlsx", {"users": rows}), null_string="NULL")
        assert result.datasource.get_table("users").records[0] == {
            "id": 1, "name": None, "age": None, "active": None,
        }


class TestSpreadsheetErrors:
    def test_malformed_value_aborts(self, write_workbook):
        """Alice and the all-null row are fine; Bob's age aborts the build."""
        path = write_workbook("book.xlsx", {"people": ALICE_BOB_ROWS})
        with pytest.raises(MalformedValue) as exc_info:
            _build(path)
        assert exc_info.value.row == 5
        assert exc_info.value.column == "Age"
        assert exc_info.value.value == "x"

    def test_undefined_type(self, write_workbook):
        path = write_workbook("book.xlsx", {"t": [["A"], ["a"], ["MONEY"]]})
        with pytest.raises(UndefinedFieldType):
            _build(path)

    def test_empty_type(self, write_workbook):
        path = write_workbook("book.xlsx", {"t": [["A", "B"], ["a", "b"], ["STRING"]]})
        with pytest.raises(FieldDefinitionError):
            _build(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailable):
            _build(tmp_path / "missing.xlsx")

    def test_corrupt_file(self, write_text):
        path = write_text("broken.xlsx", "not a zip archive")
        with pytest.raises(SourceUnavailable) as exc_info:
            _build(path)
        assert exc_info.value.__cause__ is not None

    def test_reader_releases_workbook(self, write_workbook):
        path = write_workbook("book.xlsx", {"users": USERS_ROWS})
        reader = SpreadsheetReader(config_for_files([path]).source)
        with reader:
            units = reader.list_table_units()
            next(units)
            assert reader._workbook is not None
        assert reader._workbook is None
