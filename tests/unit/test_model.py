"""
Unit tests for the in-memory model (datasource_ingest.model).
"""

import pytest

from datasource_ingest.field_types import FieldType
from datasource_ingest.model import Datasource, Field, Record, Table


def _table(name="users", records=None) -> Table:
    fields = [Field("id", FieldType.INTEGER, "ID"), Field("name", FieldType.STRING, "Name")]
    if records is None:
        records = [Record({"id": 1, "name": "Alice"}), Record({"id": 2, "name": None})]
    return Table(name=name, label="Users", fields=fields, records=records)


class TestField:
    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Field("", FieldType.STRING)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError, match="UNKNOWN"):
            Field("x", FieldType.UNKNOWN)

    def test_immutable(self):
        f = Field("x", FieldType.STRING)
        with pytest.raises(AttributeError):
            f.name = "y"


class TestRecord:
    def test_mapping_access(self):
        record = Record({"a": 1, "b": None})
        assert record["a"] == 1
        assert record["b"] is None
        assert len(record) == 2
        assert list(record) == ["a", "b"]

    def test_read_only(self):
        record = Record({"a": 1})
        with pytest.raises(TypeError):
            record["a"] = 2

    def test_source_dict_is_copied(self):
        data = {"a": 1}
        record = Record(data)
        data["a"] = 2
        assert record["a"] == 1

    def test_equality_and_hash(self):
        assert Record({"a": 1}) == Record({"a": 1})
        assert Record({"a": 1}) == {"a": 1}
        assert hash(Record({"a": 1, "b": 2})) == hash(Record({"b": 2, "a": 1}))


class TestTable:
    def test_fields_and_records(self):
        table = _table()
        assert table.field_names == ["id", "name"]
        assert len(table) == 2
        assert table.get_field("name").type is FieldType.STRING

    def test_sequences_become_tuples(self):
        table = _table()
        assert isinstance(table.fields, tuple)
        assert isinstance(table.records, tuple)

    def test_missing_field(self):
        with pytest.raises(KeyError):
            _table().get_field("age")

    def test_record_keys_must_match_fields(self):
        with pytest.raises(ValueError, match="expected"):
            _table(records=[Record({"id": 1})])

    def test_duplicate_field_names(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Table(name="t", fields=[Field("a", FieldType.STRING), Field("a", FieldType.LONG)])

    def test_empty_table(self):
        table = Table(name="empty")
        assert len(table) == 0
        assert table.field_names == []


class TestDatasource:
    def test_lookup(self):
        ds = Datasource(name="master", tables=[_table("users"), _table("admins")])
        assert ds.table_names == ["users", "admins"]
        assert ds.get_table("admins").name == "admins"

    def test_first_match_wins(self):
        first = _table("users")
        ds = Datasource(tables=[first, _table("users", records=[])])
        assert ds.get_table("users") is first

    def test_missing_table(self):
        with pytest.raises(KeyError):
            Datasource().get_table("users")

    def test_name_optional(self):
        assert Datasource().name is None
