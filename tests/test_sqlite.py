"""SQLite dialect-specific tests."""

import pytest

from pyjsonpath2sql import (
    JSON_NULL,
    SQL_NULL,
    InvalidCastTargetError,
    Op,
    UnsupportedCapabilityError,
    compile_condition,
    or_,
)

NUMBER_AGE = (
    "(CASE WHEN json_type(\"data\", '$.age') IN ('integer', 'real') "
    "THEN \"data\"->>'$.age' END)"
)


@pytest.fixture
def d(sqlite_dialect):
    return sqlite_dialect


class TestSQLiteExtraction:
    def test_member(self, d):
        result = compile_condition("data.a", "x", dialect=d)
        assert result.sql == "\"data\"->'$.a' = ?"
        assert result.parameters == ['"x"']

    def test_index_path(self, d):
        result = compile_condition("data.items[2]", "x", dialect=d)
        assert result.sql == "\"data\"->'$.items[2]' = ?"

    def test_column_level_minifies(self, d):
        result = compile_condition("data", [1], dialect=d)
        assert result.sql == "\"data\"->'$' = ?"
        assert result.parameters == ["[1]"]

    def test_unquote(self, d):
        result = compile_condition("data.a:unquote", "x", dialect=d)
        assert result.sql == "\"data\"->>'$.a' = ?"
        assert result.parameters == ["x"]

    def test_cast_applies_to_text(self, d):
        result = compile_condition("data.n::integer", {Op.GT: 2}, dialect=d)
        assert result.sql == "CAST(\"data\"->>'$.n' AS INTEGER) > ?"
        assert result.parameters == [2]

    def test_unknown_cast(self, d):
        with pytest.raises(InvalidCastTargetError):
            compile_condition("data.n::timestamp", 1, dialect=d)


class TestSQLiteNumbers:
    def test_ordering_compares_numbers(self, d):
        result = compile_condition("data.age", {Op.GT: 9}, dialect=d)
        assert result.sql == f"{NUMBER_AGE} > ?"
        assert result.parameters == [9]

    def test_float_equality_binds_raw_value(self, d):
        result = compile_condition("data.age", 1.5, dialect=d)
        assert result.sql == f"{NUMBER_AGE} = ?"
        assert result.parameters == [1.5]

    def test_in_list_of_numbers(self, d):
        result = compile_condition("data.age", {Op.IN: [1, 2]}, dialect=d)
        assert result.sql == f"{NUMBER_AGE} IN (?, ?)"
        assert result.parameters == [1, 2]

    def test_not_in_keeps_non_numbers(self, d):
        result = compile_condition("data.age", {Op.NOT_IN: [1]}, dialect=d)
        assert result.sql == (
            f"(\"data\"->'$.age' IS NOT NULL AND ({NUMBER_AGE} IS NULL OR {NUMBER_AGE} NOT IN (?)))"
        )

    def test_mixed_in_list_stays_json(self, d):
        result = compile_condition("data.age", {Op.IN: [1, "x"]}, dialect=d)
        assert result.sql == "\"data\"->'$.age' IN (?, ?)"
        assert result.parameters == ["1", '"x"']

    def test_index_path(self, d):
        result = compile_condition("data.items[2]", 5, dialect=d)
        assert result.sql.startswith("(CASE WHEN json_type(\"data\", '$.items[2]')")


class TestSQLiteNulls:
    def test_sql_null(self, d):
        result = compile_condition("data.a", SQL_NULL, dialect=d)
        assert result.sql == "\"data\"->'$.a' IS NULL"

    def test_json_null(self, d):
        result = compile_condition("data.a", JSON_NULL, dialect=d)
        assert result.sql == "\"data\"->'$.a' = ?"
        assert result.parameters == ["null"]

    def test_either_null(self, d):
        result = compile_condition("data.a", or_(SQL_NULL, JSON_NULL), dialect=d)
        assert result.sql == "(\"data\"->'$.a' IS NULL OR \"data\"->'$.a' = ?)"

    def test_column_sql_null(self, d):
        result = compile_condition("data", SQL_NULL, dialect=d)
        assert result.sql == "\"data\"->'$' IS NULL"


class TestSQLiteUnsupported:
    def test_containment(self, d):
        with pytest.raises(UnsupportedCapabilityError):
            compile_condition("data", {Op.CONTAINS: [1]}, dialect=d)

    def test_key_existence(self, d):
        with pytest.raises(UnsupportedCapabilityError):
            compile_condition("data", {Op.HAS_KEY: "a"}, dialect=d)
