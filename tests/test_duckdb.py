"""DuckDB dialect-specific tests."""

import pytest

from pyjsonpath2sql import JSON_NULL, SQL_NULL, Op, compile_condition

NUMBER_A = (
    "(CASE WHEN json_type(\"data\", '$.a') IN ('BIGINT', 'UBIGINT', 'DOUBLE') "
    "THEN CAST((\"data\"->>'$.a') AS DOUBLE) END)"
)


@pytest.fixture
def d(duckdb_dialect):
    return duckdb_dialect


class TestDuckDBComparisons:
    def test_member_extraction_parenthesized(self, d):
        result = compile_condition("data.a", "x", dialect=d)
        assert result.sql == "(\"data\"->'$.a') = $1"
        assert result.parameters == ['"x"']

    def test_numbered_placeholders(self, d):
        result = compile_condition("data", {"a": "x", "b": "y"}, dialect=d)
        assert result.sql == "(\"data\"->'$.a') = $1 AND (\"data\"->'$.b') = $2"

    def test_unquote(self, d):
        result = compile_condition("data.a:unquote", "x", dialect=d)
        assert result.sql == "(\"data\"->>'$.a') = $1"

    def test_cast(self, d):
        result = compile_condition("data.n::bigint", {Op.LTE: 7}, dialect=d)
        assert result.sql == "CAST((\"data\"->>'$.n') AS BIGINT) <= $1"
        assert result.parameters == [7]


class TestDuckDBNumbers:
    def test_ordering_compares_numbers(self, d):
        result = compile_condition("data.a", {Op.GT: 9}, dialect=d)
        assert result.sql == f"{NUMBER_A} > $1"
        assert result.parameters == [9]

    def test_float_equality_binds_raw_value(self, d):
        result = compile_condition("data.a", 1.5, dialect=d)
        assert result.sql == f"{NUMBER_A} = $1"
        assert result.parameters == [1.5]

    def test_not_equal_keeps_non_numbers(self, d):
        result = compile_condition("data.a", {Op.NE: 5}, dialect=d)
        assert result.sql == (
            f"((\"data\"->'$.a') IS NOT NULL AND ({NUMBER_A} IS NULL OR {NUMBER_A} != $1))"
        )

    def test_boolean_stays_json(self, d):
        result = compile_condition("data.a", True, dialect=d)
        assert result.sql == "(\"data\"->'$.a') = $1"
        assert result.parameters == ["true"]


class TestDuckDBNulls:
    def test_sql_null(self, d):
        result = compile_condition("data.a", SQL_NULL, dialect=d)
        assert result.sql == "(\"data\"->'$.a') IS NULL"

    def test_json_null(self, d):
        result = compile_condition("data.a", JSON_NULL, dialect=d)
        assert result.sql == "(\"data\"->'$.a') = $1"
        assert result.parameters == ["null"]


class TestDuckDBOperators:
    def test_contains(self, d):
        result = compile_condition("data.tags", {Op.CONTAINS: ["a"]}, dialect=d)
        assert result.sql == "json_contains((\"data\"->'$.tags'), $1)"
        assert result.parameters == ['["a"]']

    def test_contained(self, d):
        result = compile_condition("data", {Op.CONTAINED: [1, 2]}, dialect=d)
        assert result.sql == "json_contains($1, (\"data\"->'$'))"

    def test_has_key(self, d):
        result = compile_condition("data", {Op.HAS_KEY: "a"}, dialect=d)
        assert result.sql == "json_exists((\"data\"->'$'), $1)"
        assert result.parameters == ["$.a"]

    def test_has_any_keys(self, d):
        result = compile_condition("data", {Op.HAS_ANY_KEYS: ["a", "b"]}, dialect=d)
        assert result.sql == (
            "(json_exists((\"data\"->'$'), $1) OR json_exists((\"data\"->'$'), $2))"
        )
        assert result.parameters == ["$.a", "$.b"]

    def test_has_all_keys(self, d):
        result = compile_condition("data", {Op.HAS_ALL_KEYS: ["a", "b"]}, dialect=d)
        assert " AND " in result.sql
