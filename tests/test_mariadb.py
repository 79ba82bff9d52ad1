"""MariaDB dialect-specific tests."""

import pytest

from pyjsonpath2sql import JSON_NULL, SQL_NULL, Op, compile_condition


@pytest.fixture
def d(mariadb_dialect):
    return mariadb_dialect


class TestMariaDBComparisons:
    def test_document_compared_compact(self, d):
        result = compile_condition("data.a", {"b": [1, 2]}, dialect=d)
        assert result.sql == (
            "BINARY JSON_COMPACT(JSON_EXTRACT(`data`, '$.a.b')) = JSON_COMPACT(?)"
        )
        assert result.parameters == ["[1,2]"]

    def test_unquote(self, d):
        result = compile_condition("data.a:unquote", "x", dialect=d)
        assert result.sql == "JSON_UNQUOTE(JSON_EXTRACT(`data`, '$.a')) = ?"

    def test_cast_applies_to_text(self, d):
        result = compile_condition("data.n::integer", {Op.LT: 3}, dialect=d)
        assert result.sql == "CAST(JSON_UNQUOTE(JSON_EXTRACT(`data`, '$.n')) AS INTEGER) < ?"
        assert result.parameters == [3]

    def test_in(self, d):
        result = compile_condition("data.a", {Op.IN: ["x"]}, dialect=d)
        assert result.sql == "BINARY JSON_COMPACT(JSON_EXTRACT(`data`, '$.a')) IN (JSON_COMPACT(?))"

    def test_string_comparison_is_binary(self, d):
        result = compile_condition("data.a", "ABC", dialect=d)
        assert result.sql.startswith("BINARY JSON_COMPACT(")
        assert result.parameters == ['"ABC"']


class TestMariaDBNumbers:
    def test_ordering_compares_numbers(self, d):
        result = compile_condition("data.age", {Op.GTE: 10}, dialect=d)
        assert result.sql == (
            "(CASE WHEN JSON_TYPE(JSON_EXTRACT(`data`, '$.age')) IN ('INTEGER', 'DOUBLE') "
            "THEN CAST(JSON_EXTRACT(`data`, '$.age') AS DOUBLE) END) >= ?"
        )
        assert result.parameters == [10]

    def test_column_level_number(self, d):
        result = compile_condition("data", 1.5, dialect=d)
        assert result.sql == (
            "(CASE WHEN JSON_TYPE(`data`) IN ('INTEGER', 'DOUBLE') "
            "THEN CAST(`data` AS DOUBLE) END) = ?"
        )
        assert result.parameters == [1.5]


class TestMariaDBNulls:
    def test_json_null(self, d):
        result = compile_condition("data.a", JSON_NULL, dialect=d)
        assert result.sql == "BINARY JSON_COMPACT(JSON_EXTRACT(`data`, '$.a')) = JSON_COMPACT(?)"
        assert result.parameters == ["null"]

    def test_not_json_null(self, d):
        result = compile_condition("data.a", {Op.NE: JSON_NULL}, dialect=d)
        assert result.sql == "BINARY JSON_COMPACT(JSON_EXTRACT(`data`, '$.a')) != JSON_COMPACT(?)"

    def test_sql_null(self, d):
        result = compile_condition("data.a", SQL_NULL, dialect=d)
        assert result.sql == "JSON_EXTRACT(`data`, '$.a') IS NULL"


class TestMariaDBOperators:
    def test_contains(self, d):
        result = compile_condition("data", {Op.CONTAINS: {"a": 1}}, dialect=d)
        assert result.sql == "JSON_CONTAINS(`data`, ?)"

    def test_has_key(self, d):
        result = compile_condition("data.a", {Op.HAS_KEY: "b"}, dialect=d)
        assert result.sql == "JSON_CONTAINS_PATH(JSON_EXTRACT(`data`, '$.a'), 'one', ?)"
        assert result.parameters == ["$.b"]
