"""
Unit tests for table name resolution (datasource_ingest.normalize.names).
"""

import pytest

from datasource_ingest.normalize.names import resolve_file_table_name, resolve_table_name


class TestResolveTableName:
    """``Name(Label)`` identifiers from sheet titles."""

    def test_name_and_label(self):
        assert resolve_table_name("Customers(顧客)") == ("Customers", "顧客")

    def test_no_parentheses(self):
        assert resolve_table_name("Customers") == ("Customers", "Customers")

    def test_space_before_parenthesis_is_kept(self):
        name, label = resolve_table_name("Customers (顧客)")
        assert name == "Customers "
        assert label == "顧客"

    def test_text_after_parenthesis_ignored(self):
        assert resolve_table_name("Orders(注文)_old") == ("Orders", "注文")

    def test_empty_label(self):
        assert resolve_table_name("Orders()") == ("Orders", "")

    def test_fields_accessible_by_name(self):
        resolved = resolve_table_name("users(Users)")
        assert resolved.name == "users"
        assert resolved.label == "Users"


class TestResolveFileTableName:
    """File names: the extension is dropped before resolution."""

    def test_name_label_and_extension(self):
        assert resolve_file_table_name("Customers(顧客).csv") == ("Customers", "顧客")

    def test_plain_file_name(self):
        assert resolve_file_table_name("orders.csv") == ("orders", "orders")

    @pytest.mark.parametrize("filename", ["README", "users(Users)"])
    def test_no_extension_falls_back(self, filename):
        assert resolve_file_table_name(filename) == resolve_table_name(filename)
