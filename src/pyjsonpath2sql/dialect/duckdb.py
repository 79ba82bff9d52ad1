"""DuckDB dialect implementation."""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO

from pyjsonpath2sql._json import to_json_path
from pyjsonpath2sql._path import Member, PathSegment
from pyjsonpath2sql.dialect._base import (
    Dialect,
    DialectCapabilities,
    DialectName,
    KeyMatch,
    WriteFunc,
    write_equality,
    write_null_check,
)
from pyjsonpath2sql.dialect.sqlite import (  # noqa: F401
    quote_identifier,
    write_document_operand,
    write_json_param,
    write_string_literal,
    write_type_cast,
)
from pyjsonpath2sql.schema import ColumnType

CAPABILITIES = DialectCapabilities(
    path_array_operator=False,
    document_extraction=True,
    binary_json_type=False,
    cast_from_text=True,
    cast_types=frozenset({
        "bigint", "bool", "boolean", "date", "decimal", "double", "float",
        "hugeint", "int", "integer", "json", "numeric", "real", "smallint",
        "text", "time", "timestamp", "tinyint", "uuid", "varchar",
    }),
    containment=True,
    key_existence=True,
    json_number_compare=False,
    max_identifier_length=0,
)

DIALECT = Dialect(DialectName.DUCKDB, CAPABILITIES)


def write_param_placeholder(w: StringIO, param_index: int) -> None:
    w.write(f"${param_index}")


# --- Extraction ---
# DuckDB binds -> and ->> looser than comparisons, so extractions are parenthesized


def _write_arrow(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment], arrow: str
) -> None:
    w.write("(")
    write_column()
    w.write(arrow)
    write_string_literal(w, to_json_path(segments))
    w.write(")")


def write_document(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    _write_arrow(w, write_column, segments, "->")


def write_unquoted(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    _write_arrow(w, write_column, segments, "->>")


def write_number(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    """Numeric value at the path; NULL unless it is a JSON number."""
    w.write("(CASE WHEN json_type(")
    write_column()
    w.write(", ")
    write_string_literal(w, to_json_path(segments))
    w.write(") IN ('BIGINT', 'UBIGINT', 'DOUBLE') THEN ")
    write_type_cast(w, lambda: write_unquoted(w, write_column, segments), "DOUBLE")
    w.write(" END)")


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


# --- Containment / key existence ---


def write_containment(
    w: StringIO, write_document: WriteFunc, write_param: WriteFunc, contained: bool
) -> None:
    w.write("json_contains(")
    if contained:
        write_param()
        w.write(", ")
        write_document()
    else:
        write_document()
        w.write(", ")
        write_param()
    w.write(")")


def key_param(name: str) -> str:
    return to_json_path((Member(name),))


def write_key_existence(
    w: StringIO, write_document: WriteFunc, write_keys: list[WriteFunc], match: KeyMatch
) -> None:
    joiner = " AND " if match is KeyMatch.ALL else " OR "
    if len(write_keys) > 1:
        w.write("(")
    for i, write_key in enumerate(write_keys):
        if i:
            w.write(joiner)
        w.write("json_exists(")
        write_document()
        w.write(", ")
        write_key()
        w.write(")")
    if len(write_keys) > 1:
        w.write(")")
