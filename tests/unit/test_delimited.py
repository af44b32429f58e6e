"""
Unit tests for the delimited text reader (datasource_ingest.sources.delimited).
"""

from datetime import date, datetime

import pytest

from datasource_ingest.builder import build
from datasource_ingest.config import config_for_files
from datasource_ingest.diagnostics import DiagnosticKind
from datasource_ingest.exceptions import FieldDefinitionError, MalformedValue, SourceUnavailable
from tests.conftest import ALICE_BOB_ROWS, USERS_ROWS


def _build(*paths, **options):
    return build(config_for_files(list(paths), **options))


class TestDelimitedRead:
    def test_basic(self, write_csv):
        path = write_csv("users(Users).csv", USERS_ROWS)
        result = _build(path)

        assert result.datasource.name == "users(Users).csv"
        table = result.datasource.get_table("users")
        assert table.label == "Users"
        assert list(table.records) == [
            {"id": 1, "name": "Alice", "age": 30, "active": True},
            {"id": 2, "name": "Bob", "age": None, "active": False},
        ]

    def test_plain_file_name(self, write_csv):
        table = _build(write_csv("orders.csv", USERS_ROWS)).datasource.tables[0]
        assert (table.name, table.label) == ("orders", "orders")

    def test_temporal_text(self, write_csv):
        path = write_csv("events.csv", [
            ["When", "Day"],
            ["at", "day"],
            ["TIMESTAMP", "DATE"],
            ["2024/03/01 12:00:00", "2024/03/01"],
        ])
        record = _build(path).datasource.get_table("events").records[0]
        assert record == {"at": datetime(2024, 3, 1, 12, 0, 0), "day": date(2024, 3, 1)}

    def test_quoted_values(self, write_text):
        path = write_text("notes.csv", 'Text,N\ntext,n\nSTRING,INTEGER\n"a, b",1\n"say ""hi""",2\n')
        records = _build(path).datasource.get_table("notes").records
        assert [r["text"] for r in records] == ["a, b", 'say "hi"']

    def test_field_count_mismatch_skipped(self, write_csv):
        rows = USERS_ROWS + [["3", "Carol"], ["4", "Dan", "40", "true", "extra"]]
        result = _build(write_csv("users.csv", rows))
        assert len(result.datasource.get_table("users")) == 2
        skipped = result.diagnostics.of_kind(DiagnosticKind.FIELD_COUNT_MISMATCH)
        assert [d.row for d in skipped] == [5, 6]

    def test_blank_line_skipped(self, write_text):
        text = "A,B\na,b\nSTRING,STRING\nx,y\n\n,\nz,w\n"
        result = _build(write_text("t.csv", text))
        assert [r["a"] for r in result.datasource.get_table("t").records] == ["x", "z"]
        assert [d.row for d in result.diagnostics.of_kind(DiagnosticKind.EMPTY_ROW)] == [4, 5]

    def test_short_file_skipped_siblings_kept(self, write_csv, write_text):
        short = write_text("short.csv", "Label\nname\n")
        users = write_csv("users.csv", USERS_ROWS)
        result = _build(short, users)
        assert result.datasource.table_names == ["users"]
        [diag] = result.diagnostics.of_kind(DiagnosticKind.INSUFFICIENT_HEADER_ROWS)
        assert diag.table == "short"

    def test_charset(self, write_csv):
        rows = [["名前"], ["name"], ["STRING"], ["山田"]]
        path = write_csv("people(人).csv", rows, encoding="cp932")
        table = _build(path, charset="cp932").datasource.get_table("people")
        assert table.label == "人"
        assert table.fields[0].label == "名前"
        assert table.records[0]["name"] == "山田"

    def test_bom_is_stripped(self, write_csv):
        path = write_csv("t.csv", [["A"], ["a"], ["STRING"], ["x"]], encoding="utf-8-sig")
        assert _build(path).datasource.get_table("t").field_names == ["a"]

    def test_delimiter(self, write_text):
        path = write_text("t.csv", "A;B\na;b\nSTRING;LONG\nx;5\n")
        record = _build(path, delimiter=";").datasource.get_table("t").records[0]
        assert record == {"a": "x", "b": 5}


class TestDelimitedErrors:
    def test_malformed_value_aborts(self, write_csv):
        with pytest.raises(MalformedValue) as exc_info:
            _build(write_csv("people.csv", ALICE_BOB_ROWS))
        assert exc_info.value.row == 5

    def test_trailing_empty_name(self, write_text):
        path = write_text("t.csv", "A,\na,\nSTRING,\nx,\n")
        with pytest.raises(FieldDefinitionError):
            _build(path)

    def test_wrong_charset(self, write_csv):
        path = write_csv("t.csv", [["名前"], ["name"], ["STRING"], ["山田"]], encoding="cp932")
        with pytest.raises(SourceUnavailable):
            _build(path, charset="utf-8")

    def test_unknown_charset(self, write_csv):
        path = write_csv("t.csv", USERS_ROWS)
        with pytest.raises(SourceUnavailable):
            _build(path, charset="no-such-codec")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailable, match="not found"):
            _build(tmp_path / "missing.csv")
