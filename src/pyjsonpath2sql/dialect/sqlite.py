"""SQLite dialect implementation.

Requires SQLite 3.38 or later for the ``->`` and ``->>`` operators.
"""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO

from pyjsonpath2sql._json import to_json_path
from pyjsonpath2sql._path import PathSegment
from pyjsonpath2sql._utils import quote_identifier as _quote, string_literal
from pyjsonpath2sql.dialect._base import (
    Dialect,
    DialectCapabilities,
    DialectName,
    WriteFunc,
    write_cast,
    write_equality,
    write_null_check,
)
from pyjsonpath2sql.schema import ColumnType

CAPABILITIES = DialectCapabilities(
    path_array_operator=False,
    document_extraction=True,
    binary_json_type=False,
    cast_from_text=True,
    cast_types=frozenset({"blob", "int", "integer", "numeric", "real", "text"}),
    containment=False,
    key_existence=False,
    json_number_compare=False,
    max_identifier_length=0,
)

DIALECT = Dialect(DialectName.SQLITE, CAPABILITIES)


def quote_identifier(name: str) -> str:
    return _quote(name, '"', '"')


def write_string_literal(w: StringIO, value: str) -> None:
    w.write(string_literal(value))


def write_param_placeholder(w: StringIO, param_index: int) -> None:
    w.write("?")


# --- Extraction ---


def write_document(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    # ->'$' also minifies the stored text so it compares against compact JSON
    write_column()
    w.write("->")
    write_string_literal(w, to_json_path(segments))


def write_unquoted(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    write_column()
    w.write("->>")
    write_string_literal(w, to_json_path(segments))


def write_type_cast(w: StringIO, write_expr: WriteFunc, sql_type: str) -> None:
    write_cast(w, write_expr, sql_type)


def write_number(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    """Numeric value at the path; NULL unless it is a JSON number."""
    w.write("(CASE WHEN json_type(")
    write_column()
    w.write(", ")
    write_string_literal(w, to_json_path(segments))
    w.write(") IN ('integer', 'real') THEN ")
    # ->> yields INTEGER or REAL for numbers
    write_unquoted(w, write_column, segments)
    w.write(" END)")


# --- Comparison operands ---


def write_document_operand(
    w: StringIO, write_document: WriteFunc, column_type: ColumnType
) -> None:
    write_document()


def write_json_param(w: StringIO, write_param: WriteFunc) -> None:
    write_param()


# --- Null tests ---


def write_sql_null_test(
    w: StringIO,
    write_column: WriteFunc,
    segments: Sequence[PathSegment],
    negate: bool,
) -> None:
    write_null_check(w, lambda: write_document(w, write_column, segments), negate)


def write_json_null_test(
    w: StringIO,
    write_column: WriteFunc,
    segments: Sequence[PathSegment],
    negate: bool,
    write_param: WriteFunc,
    column_type: ColumnType,
) -> None:
    write_equality(w, lambda: write_document(w, write_column, segments), write_param, negate)
