"""PostgreSQL dialect implementation."""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO

from pyjsonpath2sql._json import path_array
from pyjsonpath2sql._path import Index, PathSegment
from pyjsonpath2sql._utils import quote_identifier as _quote, string_literal
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
    path_array_operator=True,
    document_extraction=True,
    binary_json_type=True,
    cast_from_text=False,
    cast_types=frozenset({
        "bigint", "bool", "boolean", "char", "date", "decimal", "float4",
        "float8", "int", "int2", "int4", "int8", "integer", "json", "jsonb",
        "numeric", "real", "smallint", "text", "time", "timestamp",
        "timestamptz", "uuid", "varchar",
    }),
    # jsonb casts only to numbers, booleans and JSON itself
    document_cast_types=frozenset({
        "bigint", "bool", "boolean", "decimal", "float4", "float8", "int",
        "int2", "int4", "int8", "integer", "json", "jsonb", "numeric", "real",
        "smallint",
    }),
    containment=True,
    key_existence=True,
    operators_require_binary=True,
    max_identifier_length=63,
)

DIALECT = Dialect(DialectName.POSTGRESQL, CAPABILITIES)

_KEY_OPERATORS: dict[KeyMatch, str] = {
    KeyMatch.ONE: "?",
    KeyMatch.ANY: "?|",
    KeyMatch.ALL: "?&",
}


def quote_identifier(name: str) -> str:
    return _quote(name, '"', '"')


def write_string_literal(w: StringIO, value: str) -> None:
    w.write(string_literal(value))


def write_param_placeholder(w: StringIO, param_index: int) -> None:
    w.write(f"${param_index}")


# --- Extraction ---


def _write_extraction(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment], as_text: bool
) -> None:
    write_column()
    if len(segments) == 1:
        seg = segments[0]
        w.write("->>" if as_text else "->")
        if isinstance(seg, Index):
            w.write(str(seg.n))
        else:
            write_string_literal(w, seg.name)
        return
    w.write("#>>" if as_text else "#>")
    w.write("ARRAY[")
    for i, step in enumerate(path_array(segments)):
        if i:
            w.write(",")
        write_string_literal(w, step)
    w.write("]::text[]")


def write_document(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    if not segments:
        write_column()
        return
    _write_extraction(w, write_column, segments, as_text=False)


def write_unquoted(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    _write_extraction(w, write_column, segments, as_text=True)


def write_type_cast(w: StringIO, write_expr: WriteFunc, sql_type: str) -> None:
    write_cast(w, write_expr, sql_type)


# --- Comparison operands ---


def write_document_operand(
    w: StringIO, write_document: WriteFunc, column_type: ColumnType
) -> None:
    # json has no equality operator; compare as jsonb
    if column_type is ColumnType.JSON:
        write_cast(w, write_document, "jsonb")
    else:
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
    write_equality(
        w,
        lambda: write_document_operand(
            w, lambda: write_document(w, write_column, segments), column_type
        ),
        write_param,
        negate,
    )


# --- Containment / key existence ---


def write_containment(
    w: StringIO, write_document: WriteFunc, write_param: WriteFunc, contained: bool
) -> None:
    write_document()
    w.write(" <@ " if contained else " @> ")
    write_param()


def key_param(name: str) -> str:
    return name


def write_key_existence(
    w: StringIO, write_document: WriteFunc, write_keys: list[WriteFunc], match: KeyMatch
) -> None:
    write_document()
    w.write(f" {_KEY_OPERATORS[match]} ")
    if match is KeyMatch.ONE:
        write_keys[0]()
        return
    w.write("ARRAY[")
    write_joined(w, write_keys, ", ")
    w.write("]")
