"""MySQL dialect implementation."""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO

from pyjsonpath2sql._json import to_json_path
from pyjsonpath2sql._path import Member, PathSegment
from pyjsonpath2sql._utils import escape_string_literal, quote_identifier as _quote, validate_no_null_bytes
from pyjsonpath2sql.dialect._base import (
    Dialect,
    DialectCapabilities,
    DialectName,
    KeyMatch,
    WriteFunc,
    write_cast,
    write_equality,
    write_joined,
    write_null_check,
)
from pyjsonpath2sql.schema import ColumnType

CAPABILITIES = DialectCapabilities(
    path_array_operator=False,
    document_extraction=True,
    binary_json_type=False,
    cast_from_text=False,
    cast_types=frozenset({
        "binary", "char", "date", "datetime", "decimal", "double", "float",
        "json", "nchar", "real", "signed", "time", "unsigned", "year",
    }),
    document_cast_types=frozenset({
        "decimal", "double", "float", "json", "real", "signed", "unsigned",
    }),
    containment=True,
    key_existence=True,
    json_in_list=False,
    max_identifier_length=64,
)

DIALECT = Dialect(DialectName.MYSQL, CAPABILITIES)


def quote_identifier(name: str) -> str:
    return _quote(name, "`", "`")


def write_string_literal(w: StringIO, value: str) -> None:
    # Backslash is an escape character in MySQL string literals
    validate_no_null_bytes(value)
    escaped = escape_string_literal(value.replace("\\", "\\\\"))
    w.write(f"'{escaped}'")


def write_param_placeholder(w: StringIO, param_index: int) -> None:
    w.write("?")


# --- Extraction ---


def write_document(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    if not segments:
        write_column()
        return
    w.write("JSON_EXTRACT(")
    write_column()
    w.write(", ")
    write_string_literal(w, to_json_path(segments))
    w.write(")")


def write_unquoted(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    w.write("JSON_UNQUOTE(")
    write_document(w, write_column, segments)
    w.write(")")


def write_type_cast(w: StringIO, write_expr: WriteFunc, sql_type: str) -> None:
    write_cast(w, write_expr, sql_type)


# --- Comparison operands ---


def write_document_operand(
    w: StringIO, write_document: WriteFunc, column_type: ColumnType
) -> None:
    write_document()


def write_json_param(w: StringIO, write_param: WriteFunc) -> None:
    w.write("CAST(")
    write_param()
    w.write(" AS JSON)")


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
    write_equality(
        w,
        lambda: write_document(w, write_column, segments),
        lambda: write_json_param(w, write_param),
        negate,
    )


# --- Containment / key existence ---


def write_containment(
    w: StringIO, write_document: WriteFunc, write_param: WriteFunc, contained: bool
) -> None:
    w.write("JSON_CONTAINS(")
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
    w.write("JSON_CONTAINS_PATH(")
    write_document()
    w.write(", 'all', " if match is KeyMatch.ALL else ", 'one', ")
    write_joined(w, write_keys, ", ")
    w.write(")")
