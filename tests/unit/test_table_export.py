"""Tests for delimited table serialization."""
from datetime import date, datetime
from decimal import Decimal

from fileservice.api.services.table_export import format_value, serialize_table


class TestSerializeTable:
    def test_header_and_rows(self):
        assert serialize_table(["id", "name"], [(1, "Ada"), (2, "Grace")]) == "id,name\n1,Ada\n2,Grace\n"

    def test_header_only(self):
        assert serialize_table(["id", "name"], []) == "id,name\n"

    def test_quotes_delimiter(self):
        assert serialize_table(["v"], [("a,b",)]) == 'v\n"a,b"\n'

    def test_doubles_embedded_quotes(self):
        assert serialize_table(["v"], [('say "hi"',)]) == 'v\n"say ""hi"""\n'

    def test_quotes_newlines(self):
        assert serialize_table(["a", "b"], [("line1\nline2", 1)]) == 'a,b\n"line1\nline2",1\n'

    def test_null_is_empty_field(self):
        assert serialize_table(["a", "b", "c"], [(1, None, 3)]) == "a,b,c\n1,,3\n"

    def test_custom_delimiter(self):
        assert serialize_table(["a", "b"], [("x;y", 2)], delimiter=";") == 'a;b\n"x;y";2\n'


class TestFormatValue:
    def test_values(self):
        assert format_value(None) == ""
        assert format_value(42) == "42"
        assert format_value(Decimal("9.50")) == "9.50"
        assert format_value(True) == "True"
        assert format_value(b"\x01\xff") == "01ff"
        assert format_value(date(2024, 1, 31)) == "2024-01-31"
        assert format_value(datetime(2024, 1, 31, 12, 30)) == "2024-01-31T12:30:00"
